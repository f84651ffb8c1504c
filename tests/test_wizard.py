"""Tests for the project wizard: pure transitions and the async controller."""

import asyncio
import json

import httpx
import pytest

from genesis.agents.accumulator import SYNTHESIS_FAILED_MARKER
from genesis.agents.scoping import DEFAULT_QUESTIONS
from genesis.wizard import WizardController, can_submit_answers, new_session, transition


def _answering_session(questions=("Q1?", "Q2?", "Q3?")):
    session = transition(new_session(), "start")
    session = transition(session, "submit_idea", "solar lawnmower")
    return transition(session, "questions_ready", list(questions))


# ---------------------------------------------------------------------------
# transition
# ---------------------------------------------------------------------------


class TestTransition:
    def test_start_opens_idea_input(self):
        session = transition(new_session(), "start")
        assert session["state"] == "INPUT_IDEA"

    def test_submit_idea_moves_to_questioning(self):
        session = transition(transition(new_session(), "start"), "submit_idea", "  solar lawnmower ")
        assert session["state"] == "AI_QUESTIONING"
        assert session["idea"] == "solar lawnmower"

    @pytest.mark.parametrize("idea", ["", "   ", None])
    def test_empty_idea_stays_in_place(self, idea):
        session = transition(new_session(), "start")
        assert transition(session, "submit_idea", idea) is session

    def test_questions_ready_initialises_answers(self):
        session = _answering_session()
        assert session["state"] == "USER_ANSWERING"
        assert session["answers"] == ["", "", ""]

    def test_questions_ready_with_empty_list_uses_defaults(self):
        session = _answering_session(questions=())
        assert session["questions"] == DEFAULT_QUESTIONS
        assert len(session["answers"]) == 3

    def test_set_answer(self):
        session = transition(_answering_session(), "set_answer", (1, "homeowners"))
        assert session["answers"] == ["", "homeowners", ""]

    def test_set_answer_out_of_range_ignored(self):
        session = _answering_session()
        assert transition(session, "set_answer", (7, "x")) is session

    def test_submit_answers_with_blank_slots(self):
        session = transition(_answering_session(), "submit_answers")
        assert session["state"] == "GENERATING_PLAN"
        assert len(session["answers"]) == len(session["questions"])

    def test_plan_ready_returns_to_idle(self):
        session = transition(transition(_answering_session(), "submit_answers"), "plan_ready")
        assert session["state"] == "IDLE"
        assert session["questions"] == [] and session["idea"] == ""

    def test_cancel_from_every_state(self):
        sessions = [
            new_session(),
            transition(new_session(), "start"),
            transition(transition(new_session(), "start"), "submit_idea", "idea"),
            _answering_session(),
            transition(_answering_session(), "submit_answers"),
        ]
        for session in sessions:
            cancelled = transition(session, "cancel")
            assert cancelled["state"] == "IDLE"
            assert cancelled["session_id"] != session["session_id"]

    def test_events_out_of_order_are_ignored(self):
        idle = new_session()
        for event in ("submit_idea", "questions_ready", "submit_answers", "plan_ready"):
            assert transition(idle, event, "x") is idle
        answering = _answering_session()
        assert transition(answering, "start") is answering
        assert transition(answering, "plan_ready") is answering

    def test_unknown_event_raises(self):
        with pytest.raises(ValueError, match="Unknown wizard event"):
            transition(new_session(), "teleport")

    def test_transition_does_not_mutate_input(self):
        session = _answering_session()
        snapshot = json.loads(json.dumps(session))
        transition(session, "set_answer", (0, "changed"))
        assert session == snapshot

    def test_cannot_submit_before_questions(self):
        session = transition(new_session(), "start")
        assert can_submit_answers(session) is False


# ---------------------------------------------------------------------------
# WizardController
# ---------------------------------------------------------------------------


def _questions_then_whiteboard(fake_llm, llm_reply, whiteboard="## Mission\nA mower that runs on sunlight."):
    fake_llm.ainvoke.side_effect = [
        llm_reply(json.dumps(["Who mows?", "Lawn size?", "Budget?"])),
        llm_reply(whiteboard),
    ]


class TestWizardController:
    def test_full_run_creates_project(self, fake_llm, repository, llm_reply):
        _questions_then_whiteboard(fake_llm, llm_reply)
        wizard = WizardController(repository)

        async def scenario():
            wizard.start()
            assert await wizard.submit_idea("solar lawnmower") is True
            assert wizard.state == "USER_ANSWERING"
            for i, answer in enumerate(["Homeowners", "Half an acre", "$300"]):
                wizard.set_answer(i, answer)
            return await wizard.submit_answers()

        project = asyncio.run(scenario())

        assert project["whiteboard"]
        assert project["whiteboard"] != "solar lawnmower"
        assert project["description"] == "solar lawnmower"
        assert project["title"] == "solar lawnmower"
        assert project["status"] == "IN_PROGRESS"
        assert project["notes"] == []
        assert wizard.state == "IDLE"
        assert repository.list() == [project]

    def test_answers_reach_synthesis_prompt(self, fake_llm, repository, llm_reply):
        _questions_then_whiteboard(fake_llm, llm_reply)
        wizard = WizardController(repository)

        async def scenario():
            wizard.start()
            await wizard.submit_idea("solar lawnmower")
            wizard.set_answer(2, "$300")
            await wizard.submit_answers()

        asyncio.run(scenario())
        prompt = fake_llm.ainvoke.call_args.args[0][-1]["content"]
        assert "Q: Budget?\nA: $300" in prompt
        assert "Q: Who mows?\nA: " in prompt

    def test_empty_idea_makes_no_call(self, fake_llm, repository):
        wizard = WizardController(repository)
        wizard.start()
        assert asyncio.run(wizard.submit_idea("   ")) is False
        assert wizard.state == "INPUT_IDEA"
        fake_llm.ainvoke.assert_not_called()

    def test_question_failure_uses_defaults(self, fake_llm, repository):
        fake_llm.ainvoke.side_effect = httpx.ConnectError("refused")
        wizard = WizardController(repository)
        wizard.start()
        assert asyncio.run(wizard.submit_idea("solar lawnmower")) is True
        assert wizard.session["questions"] == DEFAULT_QUESTIONS
        assert wizard.session["answers"] == ["", "", ""]

    def test_malformed_questions_use_defaults(self, fake_llm, repository, llm_reply):
        fake_llm.ainvoke.return_value = llm_reply('{"questions": "nope"}')
        wizard = WizardController(repository)
        wizard.start()
        asyncio.run(wizard.submit_idea("solar lawnmower"))
        assert wizard.session["questions"] == DEFAULT_QUESTIONS

    def test_synthesis_failure_still_creates_project(self, fake_llm, repository, llm_reply):
        fake_llm.ainvoke.side_effect = [
            llm_reply(json.dumps(["A?", "B?", "C?"])),
            httpx.ReadTimeout("slow"),
        ]
        wizard = WizardController(repository)

        async def scenario():
            wizard.start()
            await wizard.submit_idea("solar lawnmower")
            return await wizard.submit_answers()

        project = asyncio.run(scenario())
        assert project["whiteboard"] == SYNTHESIS_FAILED_MARKER
        assert len(repository.list()) == 1

    def test_submit_answers_before_questions_is_refused(self, fake_llm, repository):
        wizard = WizardController(repository)
        wizard.start()
        assert wizard.can_submit_answers is False
        assert asyncio.run(wizard.submit_answers()) is None
        assert repository.list() == []

    def test_cancel_in_every_state_creates_nothing(self, fake_llm, repository, llm_reply):
        existing = {"id": "old", "title": "Old", "description": "", "whiteboard": "",
                    "status": "IDEA", "notes": []}
        repository.add(existing)
        fake_llm.ainvoke.return_value = llm_reply(json.dumps(["A?", "B?", "C?"]))

        wizard = WizardController(repository)
        wizard.start()
        wizard.cancel()
        wizard.start()
        asyncio.run(wizard.submit_idea("solar lawnmower"))
        wizard.set_answer(0, "x")
        wizard.cancel()

        assert wizard.state == "IDLE"
        assert repository.list() == [existing]

    def test_cancel_during_questioning_discards_questions(self, fake_llm, repository, llm_reply):
        gate = asyncio.Event()

        async def _slow(messages):
            await gate.wait()
            return llm_reply(json.dumps(["A?", "B?", "C?"]))

        fake_llm.ainvoke.side_effect = _slow
        wizard = WizardController(repository)

        async def scenario():
            wizard.start()
            task = asyncio.create_task(wizard.submit_idea("solar lawnmower"))
            while wizard.state != "AI_QUESTIONING":
                await asyncio.sleep(0)
            wizard.cancel()
            gate.set()
            return await task

        assert asyncio.run(scenario()) is False
        assert wizard.state == "IDLE"
        assert wizard.session["questions"] == []

    def test_cancel_during_planning_creates_no_project(self, fake_llm, repository, llm_reply):
        gate = asyncio.Event()
        calls = []

        async def _respond(messages):
            calls.append(messages)
            if len(calls) == 1:
                return llm_reply(json.dumps(["A?", "B?", "C?"]))
            await gate.wait()
            return llm_reply("late whiteboard")

        fake_llm.ainvoke.side_effect = _respond
        wizard = WizardController(repository)

        async def scenario():
            wizard.start()
            await wizard.submit_idea("solar lawnmower")
            task = asyncio.create_task(wizard.submit_answers())
            while len(calls) < 2:
                await asyncio.sleep(0)
            assert wizard.state == "GENERATING_PLAN"
            wizard.cancel()
            gate.set()
            return await task

        assert asyncio.run(scenario()) is None
        assert repository.list() == []
        assert wizard.state == "IDLE"

    def test_restart_mid_flow_discards_prior_session(self, fake_llm, repository, llm_reply):
        fake_llm.ainvoke.return_value = llm_reply(json.dumps(["A?", "B?", "C?"]))
        wizard = WizardController(repository)
        wizard.start()
        asyncio.run(wizard.submit_idea("first idea"))
        first_id = wizard.session["session_id"]

        wizard.start()

        assert wizard.state == "INPUT_IDEA"
        assert wizard.session["session_id"] != first_id
        assert wizard.session["idea"] == ""
        assert wizard.session["questions"] == []

    def test_new_project_status_from_config(self, fake_llm, repository, mock_config, llm_reply):
        mock_config["new_project_status"] = "IDEA"
        _questions_then_whiteboard(fake_llm, llm_reply)
        wizard = WizardController(repository)

        async def scenario():
            wizard.start()
            await wizard.submit_idea("solar lawnmower")
            return await wizard.submit_answers()

        assert asyncio.run(scenario())["status"] == "IDEA"

    def test_without_repository_returns_project(self, fake_llm, llm_reply):
        _questions_then_whiteboard(fake_llm, llm_reply)
        wizard = WizardController()

        async def scenario():
            wizard.start()
            await wizard.submit_idea("a very long idea about autonomous solar lawn care")
            return await wizard.submit_answers()

        project = asyncio.run(scenario())
        assert project["title"] == "a very long idea about..."
