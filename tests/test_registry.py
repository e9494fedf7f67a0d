"""
Тесты для AgentRegistry — реестра именованных агентов.
"""

import threading

import pytest

from covenant_service.core import (
    AgentRegistry,
    AlreadyExistsError,
    BaseCovenantAgent,
    InvalidInputError,
    NotFoundError,
)


class MockAgent(BaseCovenantAgent):
    """Тестовая реализация BaseCovenantAgent."""

    def __init__(self, name: str, capability: str = "echo") -> None:
        super().__init__(name, capability=capability)

    async def handle(self, task: str) -> str:
        return task


@pytest.fixture
def registry():
    """Создаёт новый реестр для каждого теста."""
    return AgentRegistry()


class TestAgentRegistryBasic:
    """Базовые тесты AgentRegistry."""

    def test_empty_registry(self, registry):
        """Новый реестр пустой."""
        assert len(registry) == 0
        assert registry.list_available() == []

    def test_register_single(self, registry):
        """Регистрация одного агента."""
        agent = MockAgent("Lorekeeper")

        registry.register("Lorekeeper", agent)

        assert len(registry) == 1
        assert "Lorekeeper" in registry
        assert registry.lookup("Lorekeeper") is agent

    def test_register_duplicate_keeps_first(self, registry):
        """Повторная регистрация падает и не подменяет экземпляр."""
        first = MockAgent("A")
        second = MockAgent("A")
        registry.register("A", first)

        with pytest.raises(AlreadyExistsError, match="already registered"):
            registry.register("A", second)

        assert registry.lookup("A") is first

    def test_register_empty_name(self, registry):
        """Пустое имя отклоняется."""
        with pytest.raises(InvalidInputError):
            registry.register("", MockAgent("x"))

    def test_register_non_agent(self, registry):
        """Объект без интерфейса агента отклоняется."""
        with pytest.raises(InvalidInputError, match="does not implement"):
            registry.register("bad", object())  # type: ignore[arg-type]
        assert "bad" not in registry


class TestAgentRegistryLookup:
    """Тесты получения и удаления агентов."""

    def test_lookup_missing(self, registry):
        """Поиск незарегистрированного имени бросает NotFoundError."""
        registry.register("A", MockAgent("A"))

        with pytest.raises(NotFoundError) as exc_info:
            registry.lookup("B")

        assert exc_info.value.details == {"available": ["A"]}

    def test_get_missing_returns_none(self, registry):
        """get() возвращает None для отсутствующего имени."""
        assert registry.get("ghost") is None

    def test_unregister(self, registry):
        """Удаление возвращает агента и освобождает имя."""
        agent = MockAgent("A")
        registry.register("A", agent)

        assert registry.unregister("A") is agent
        assert "A" not in registry
        registry.register("A", MockAgent("A"))

    def test_unregister_missing(self, registry):
        """Удаление отсутствующего имени бросает NotFoundError."""
        with pytest.raises(NotFoundError):
            registry.unregister("ghost")

    def test_find_by_capability_sorted(self, registry):
        """Поиск по capability возвращает агентов в порядке имён."""
        registry.register("zeta", MockAgent("zeta", capability="scribe"))
        registry.register("alpha", MockAgent("alpha", capability="scribe"))
        registry.register("mid", MockAgent("mid", capability="research"))

        names = [a.name for a in registry.find_by_capability("scribe")]

        assert names == ["alpha", "zeta"]
        assert registry.find_by_capability("fortress") == []

    def test_iteration_and_repr(self, registry):
        """Итерация и repr отдают отсортированные имена."""
        registry.register("b", MockAgent("b"))
        registry.register("a", MockAgent("a"))

        assert list(registry) == ["a", "b"]
        assert repr(registry) == "<AgentRegistry(agents=['a', 'b'])>"


class TestAgentRegistryConcurrency:
    """Параллельная регистрация."""

    def test_concurrent_registration_single_winner(self, registry):
        """Из N потоков с одним именем успешен ровно один."""
        workers = 16
        barrier = threading.Barrier(workers)
        successes: list[MockAgent] = []
        conflicts: list[AlreadyExistsError] = []
        guard = threading.Lock()

        def worker() -> None:
            agent = MockAgent("shared")
            barrier.wait()
            try:
                registry.register("shared", agent)
            except AlreadyExistsError as exc:
                with guard:
                    conflicts.append(exc)
            else:
                with guard:
                    successes.append(agent)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(successes) == 1
        assert len(conflicts) == workers - 1
        assert registry.lookup("shared") is successes[0]
