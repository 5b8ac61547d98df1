import pytest

from conftest import FIXED_TIME, FakeClient, ok_response
from medichat.chatbot.query_orchestrator import QueryOrchestrator
from medichat.config import MEDICAL_POLICY_PROMPT, REQUEST_FAILED_MESSAGE
from medichat.errors import InvalidTransitionError, PreconditionError, ResponseError
from medichat.formatting import Span, format_response
from medichat.schema.core_schema import ReportTurn, SessionPhase, UserTurn
from medichat.schema.schema_config import PhaseKind


def test_user_turn_committed_before_network(store):
    seen = {}

    def on_call(_request):
        seen["turns"] = store.snapshot().turns
        seen["phase"] = store.phase.kind

    orch = QueryOrchestrator(llm_client=FakeClient(on_call=on_call), store=store)
    orch.submit("I have a headache")

    assert len(seen["turns"]) == 1
    assert isinstance(seen["turns"][0], UserTurn)
    assert seen["phase"] == PhaseKind.PENDING


def test_well_formed_response_appends_one_report(orchestrator, store, fake_client):
    fake_client.response = ok_response("\n  Rest and drink fluids.  \n")
    report = orchestrator.submit("  sore throat  ")

    assert report is not None
    assert len(store) == 2
    turn = store.turns[1]
    assert isinstance(turn, ReportTurn)
    assert turn.report is report
    assert report.query == "  sore throat  "
    assert report.response == "Rest and drink fluids."
    assert report.created_at == FIXED_TIME
    assert store.phase.is_idle
    assert len(fake_client.calls) == 1


def test_missing_candidates_sets_error_and_no_report(orchestrator, store, fake_client):
    fake_client.response = {"promptFeedback": {"blockReason": "SAFETY"}}
    result = orchestrator.submit("question")

    assert result is None
    assert len(store) == 1
    assert store.phase.kind == PhaseKind.ERROR
    assert store.phase.message == REQUEST_FAILED_MESSAGE
    assert store.phase.turn_index == 0
    assert orchestrator.last_error == REQUEST_FAILED_MESSAGE


@pytest.mark.parametrize(
    "response",
    [
        {},
        {"candidates": []},
        {"candidates": None},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{}]}}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        {"candidates": [{"content": {"parts": [{"text": "   \n"}]}}]},
        "not a mapping",
    ],
)
def test_malformed_responses_are_uniform_errors(orchestrator, store, fake_client, response):
    fake_client.response = response
    assert orchestrator.submit("question") is None
    assert store.phase.is_error
    assert [type(t) for t in store.turns] == [UserTurn]


def test_transport_failure_is_recorded_as_error(orchestrator, store, fake_client):
    fake_client.error = ConnectionError("network down")
    assert orchestrator.submit("question") is None
    assert store.phase.is_error
    assert store.phase.message == REQUEST_FAILED_MESSAGE
    assert len(fake_client.calls) == 1


def test_client_response_error_is_recorded_as_error(orchestrator, store, fake_client):
    fake_client.error = ResponseError("Gemini request failed: 500")
    assert orchestrator.submit("question") is None
    assert store.phase.is_error


def test_retry_after_error_clears_it(orchestrator, store, fake_client):
    fake_client.error = TimeoutError("slow")
    orchestrator.submit("first")
    assert store.phase.is_error

    fake_client.error = None
    report = orchestrator.submit("second")
    assert report is not None
    assert store.phase.is_idle
    assert orchestrator.last_error is None
    assert [type(t) for t in store.turns] == [UserTurn, UserTurn, ReportTurn]
    assert len(fake_client.calls) == 2


def test_submit_while_pending_is_ignored(store):
    nested = {}

    def on_call(_request):
        before = store.snapshot()
        nested["result"] = orch.submit("second question")
        nested["unchanged"] = store.snapshot() == before

    client = FakeClient(on_call=on_call)
    orch = QueryOrchestrator(llm_client=client, store=store)
    report = orch.submit("first question")

    assert nested["result"] is None
    assert nested["unchanged"] is True
    assert len(client.calls) == 1
    assert report is not None
    assert [type(t) for t in store.turns] == [UserTurn, ReportTurn]
    assert store.turns[0].text == "first question"


def test_cough_scenario_marks_emphasis(orchestrator, fake_client):
    fake_client.response = ok_response("**Rest** and hydrate.\nSee a doctor if it lasts >2 weeks.")
    report = orchestrator.submit("I have a persistent cough")

    lines = format_response(report.response)
    assert len(lines) == 2
    assert Span("Rest", True) in lines[0]
    assert lines[1] == [Span("See a doctor if it lasts >2 weeks.", False)]


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_query_is_precondition_error(orchestrator, store, fake_client, text):
    with pytest.raises(PreconditionError):
        orchestrator.submit(text)
    assert len(store) == 0
    assert store.phase.is_idle
    assert fake_client.calls == []


def test_missing_credential_makes_no_call(store):
    client = FakeClient(configured=False)
    orch = QueryOrchestrator(llm_client=client, store=store)

    with pytest.raises(PreconditionError) as exc:
        orch.submit("I have a fever")

    assert "API key" in exc.value.message
    assert len(client.calls) == 0
    assert len(store) == 0
    assert store.phase.is_idle


def test_precondition_failure_keeps_prior_error(orchestrator, store, fake_client):
    fake_client.error = ConnectionError("down")
    orchestrator.submit("first")
    with pytest.raises(PreconditionError):
        orchestrator.submit("")
    assert store.phase.is_error
    assert len(store) == 1


def test_request_carries_policy_generation_and_safety(orchestrator, fake_client):
    orchestrator.submit("Is ibuprofen safe?")
    payload = fake_client.calls[0].to_payload()

    text = payload["contents"][0]["parts"][0]["text"]
    assert text == f"{MEDICAL_POLICY_PROMPT}\n\nUser: Is ibuprofen safe?\n\nAssistant:"
    assert payload["generationConfig"] == {
        "temperature": 0.7,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 150,
    }
    categories = {s["category"] for s in payload["safetySettings"]}
    assert categories == {
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    }
    assert {s["threshold"] for s in payload["safetySettings"]} == {"BLOCK_MEDIUM_AND_ABOVE"}


def test_custom_policy_prompt(store, fake_client):
    orch = QueryOrchestrator(llm_client=fake_client, store=store, policy_prompt="Be terse.")
    orch.submit("hello")
    assert fake_client.calls[0].prompt_text.startswith("Be terse.\n\nUser: hello")


def test_report_ids_distinct_within_session(orchestrator, store):
    for i in range(25):
        orchestrator.submit(f"question {i}")
    ids = [r.id for r in store.reports()]
    assert len(ids) == 25
    assert len(set(ids)) == 25


def test_reset_starts_empty_session(orchestrator, store):
    orchestrator.submit("question")
    new_store = orchestrator.reset()
    assert new_store is not store
    assert len(orchestrator.store) == 0
    assert len(store) == 2


def test_interrupt_during_request_leaves_error_phase(store):
    client = FakeClient(error=KeyboardInterrupt())
    orch = QueryOrchestrator(llm_client=client, store=store)

    with pytest.raises(KeyboardInterrupt):
        orch.submit("first")

    assert store.phase.is_error
    assert store.phase.turn_index == 0
    assert orch.last_error == REQUEST_FAILED_MESSAGE

    client.error = None
    report = orch.submit("second")
    assert report is not None
    assert store.phase.is_idle
    assert len(client.calls) == 2
    assert [type(t) for t in store.turns] == [UserTurn, UserTurn, ReportTurn]


def test_failing_listener_does_not_wedge_session(store):
    def listener(snapshot):
        if snapshot.phase.is_pending:
            raise OSError("disk full")

    unsubscribe = store.subscribe(listener)
    client = FakeClient()
    orch = QueryOrchestrator(llm_client=client, store=store)

    with pytest.raises(OSError):
        orch.submit("first")
    assert store.phase.is_error

    unsubscribe()
    assert orch.submit("second") is not None
    assert store.phase.is_idle


def test_reset_while_pending_is_invalid_transition(store):
    orch = QueryOrchestrator(llm_client=FakeClient(), store=store)
    store.set_phase(SessionPhase.pending())
    with pytest.raises(InvalidTransitionError):
        orch.reset()
    assert orch.store is store
