"""python -m taskstack でサーバーを起動"""

from taskstack.main import run

if __name__ == "__main__":
    run()
