"""pytest設定とテスト環境インフラ

基本的なフィクスチャとテスト設定のエントリーポイント
"""

import os

# taskstack のインポート前にテスト用の環境変数を設定する
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Generator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from taskstack.core.config import Settings, create_test_settings, reset_settings  # noqa: E402
from taskstack.core.context import AppContext  # noqa: E402
from taskstack.repositories.task import TaskRepository  # noqa: E402
from tests.fixtures.entities import *  # noqa: E402, F403, F401
from tests.fixtures.sample_data import *  # noqa: E402, F403, F401
from tests.tests_config.app_factory import create_test_app, create_test_context  # noqa: E402
from tests.tests_config.fakes import FailingCache, FakeCache  # noqa: E402


@pytest.fixture
def test_settings() -> Generator[Settings]:
    """テスト用設定（プロセス全体の設定インスタンスも差し替える）"""
    yield create_test_settings()
    reset_settings()


@pytest.fixture
def fake_cache() -> FakeCache:
    """インメモリキャッシュ"""
    return FakeCache()


@pytest.fixture
def failing_cache() -> FailingCache:
    """常に失敗するキャッシュ"""
    return FailingCache()


@pytest_asyncio.fixture
async def app_context(test_settings: Settings, fake_cache: FakeCache) -> AsyncGenerator[AppContext]:
    """SQLite + FakeCache のアプリケーションコンテキスト"""
    context = create_test_context(test_settings, fake_cache)
    await context.startup()
    yield context
    await context.shutdown()


@pytest_asyncio.fixture
async def degraded_context(test_settings: Settings, failing_cache: FailingCache) -> AsyncGenerator[AppContext]:
    """キャッシュが停止しているアプリケーションコンテキスト"""
    context = create_test_context(test_settings, failing_cache)
    await context.startup()
    yield context
    await context.shutdown()


@pytest.fixture
def repository(app_context: AppContext) -> TaskRepository:
    """SQLite + FakeCache のタスクリポジトリ"""
    return app_context.repository


@pytest_asyncio.fixture
async def async_client(app_context: AppContext) -> AsyncGenerator[AsyncClient]:
    """テスト用非同期HTTPクライアント"""
    app = create_test_app(app_context)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def degraded_client(degraded_context: AppContext) -> AsyncGenerator[AsyncClient]:
    """キャッシュ停止時のテスト用非同期HTTPクライアント"""
    app = create_test_app(degraded_context)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
