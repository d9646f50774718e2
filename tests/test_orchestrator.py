import pytest

from services.chat_gateway.app.errors import InvalidInputError
from services.chat_gateway.app.logic.catalog import StaticCatalogProvider
from services.chat_gateway.app.logic.orchestrator import FallbackOrchestrator, RunState
from services.chat_gateway.app.logic.outcomes import AttemptOutcome


class ScriptedClient:
    """Completion client stub answering from a per-model script."""

    def __init__(self, script):
        self.script = script
        self.calls = []

    async def complete(self, prompt, model, timeout):
        self.calls.append(model)
        return self.script[model]


class CountingCatalog(StaticCatalogProvider):
    def __init__(self, models):
        super().__init__(models)
        self.calls = 0

    async def get_candidates(self):
        self.calls += 1
        return await super().get_candidates()


def _orchestrator(models, script):
    client = ScriptedClient(script)
    catalog = CountingCatalog(models)
    return FallbackOrchestrator(catalog=catalog, client=client, timeout=1), client, catalog


@pytest.mark.asyncio
@pytest.mark.parametrize("k", [0, 1, 3])
async def test_success_after_k_failures(k):
    models = ["m0", "m1", "m2", "m3", "m4"]
    script = {m: AttemptOutcome.fatal("model not found") for m in models}
    script[f"m{k}"] = AttemptOutcome.success("done")
    orch, client, _ = _orchestrator(models, script)

    result = await orch.run("hello")

    assert result.state is RunState.SUCCEEDED
    assert result.model_used == f"m{k}"
    assert result.content == "done"
    assert result.attempted == models[: k + 1]
    assert client.calls == models[: k + 1]


@pytest.mark.asyncio
async def test_all_failures_exhaust_in_order():
    models = ["A", "B", "C"]
    script = {
        "A": AttemptOutcome.retriable("Rate limit exceeded", status_code=429, error_code=429),
        "B": AttemptOutcome.transport("timeout"),
        "C": AttemptOutcome.fatal("Model is overloaded"),
    }
    orch, _, _ = _orchestrator(models, script)

    result = await orch.run("hello")

    assert result.state is RunState.EXHAUSTED
    assert result.attempted == ["A", "B", "C"]
    assert result.last_error == "Model is overloaded"
    assert result.model_used is None


@pytest.mark.asyncio
async def test_transitions_are_recorded():
    script = {"A": AttemptOutcome.transport("timeout"), "B": AttemptOutcome.success("ok")}
    orch, _, _ = _orchestrator(["A", "B"], script)

    result = await orch.run("hello")

    assert result.transitions == [
        (RunState.PENDING, None),
        (RunState.TRYING, "A"),
        (RunState.TRYING, "B"),
        (RunState.SUCCEEDED, "B"),
    ]


@pytest.mark.asyncio
async def test_exhausted_transitions_end_in_exhausted():
    orch, _, _ = _orchestrator(["A"], {"A": AttemptOutcome.fatal("model not found")})

    result = await orch.run("hello")

    assert result.transitions[-1] == (RunState.EXHAUSTED, None)


@pytest.mark.asyncio
async def test_duplicate_candidates_are_tried_once():
    script = {"A": AttemptOutcome.fatal("model not found"), "B": AttemptOutcome.fatal("model not found")}
    orch, client, _ = _orchestrator(["A", "B", "A", "B"], script)

    result = await orch.run("hello")

    assert client.calls == ["A", "B"]
    assert result.attempted == ["A", "B"]


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", [None, "", "   ", 42])
async def test_invalid_prompt_consumes_nothing(prompt):
    orch, client, catalog = _orchestrator(["A"], {"A": AttemptOutcome.success("x")})

    with pytest.raises(InvalidInputError) as exc_info:
        await orch.run(prompt)

    assert exc_info.value.status_code == 400
    assert exc_info.value.to_payload() == {"error": "Prompt is required"}
    assert client.calls == []
    assert catalog.calls == 0
