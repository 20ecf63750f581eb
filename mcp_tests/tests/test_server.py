import pytest

import server.server as server_mod


class RecordingMCP:
    def __init__(self) -> None:
        self.tools = {}
        self.run_calls = []

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator

    def run(self, *, transport: str):
        self.run_calls.append(transport)


@pytest.fixture
def server(monkeypatch, tmp_path):
    fake = RecordingMCP()
    monkeypatch.setattr(server_mod, "mcp", fake)
    monkeypatch.setattr(server_mod, "CODERABBIT_API_KEY", "key")
    monkeypatch.setattr(server_mod, "CACHE_SWEEP_SECONDS", 0)
    monkeypatch.setattr(server_mod, "GIT_REPO_ROOT", tmp_path)

    caches = []
    real_build = server_mod.build_cache

    def build_cache():
        c = real_build()
        caches.append(c)
        return c

    monkeypatch.setattr(server_mod, "build_cache", build_cache)
    return fake, caches


CORE_TOOLS = {
    "generateReport",
    "getCacheStats",
    "triggerReview",
    "getReviewStatus",
    "askCodeRabbit",
    "getReviewHistory",
    "configureReview",
}
GITHUB_TOOLS = {
    "createPRForReview",
    "pushChangesAndCreatePR",
    "getCodeRabbitComments",
    "getCodeRabbitReviews",
    "askCodeRabbitInPR",
}


def test_main_without_github_token(monkeypatch, server):
    fake, caches = server
    monkeypatch.setattr(server_mod, "GITHUB_TOKEN", None)

    server_mod.main()

    assert set(fake.tools) == CORE_TOOLS
    assert fake.run_calls == ["stdio"]
    # The cache is torn down once the server stops
    assert len(caches) == 1
    assert caches[0].destroyed is True


def test_main_with_github_token(monkeypatch, server):
    fake, caches = server
    monkeypatch.setattr(server_mod, "GITHUB_TOKEN", "ghp_x")

    server_mod.main()

    assert set(fake.tools) == CORE_TOOLS | GITHUB_TOOLS


def test_register_tools_count_matches_registrations(monkeypatch, server):
    fake, _ = server
    monkeypatch.setattr(server_mod, "GITHUB_TOKEN", "ghp_x")

    cache = server_mod.TTLCache(sweep_interval_seconds=0)
    try:
        assert server_mod.register_tools(cache) == len(fake.tools)
    finally:
        cache.destroy()


def test_main_requires_api_key(monkeypatch, server):
    fake, caches = server
    monkeypatch.setattr(server_mod, "CODERABBIT_API_KEY", None)

    with pytest.raises(SystemExit) as ei:
        server_mod.main()

    assert ei.value.code == 1
    assert fake.run_calls == []
    assert caches == []


def test_cache_destroyed_when_run_fails(monkeypatch, server):
    fake, caches = server
    monkeypatch.setattr(server_mod, "GITHUB_TOKEN", None)

    def boom(*, transport: str):
        raise RuntimeError("transport closed")

    monkeypatch.setattr(fake, "run", boom)

    with pytest.raises(RuntimeError):
        server_mod.main()

    assert caches[0].destroyed is True
