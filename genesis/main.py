"""Entry point: terminal driver for the project wizard and the project tools.

Usage:
    genesis new [--quick] [idea ...]        run the wizard (prompts when no idea given)
    genesis list                            list projects
    genesis show <project> [CATEGORY]       print whiteboard and notes
    genesis note <project> <CATEGORY> text  append a note
    genesis ask <project> <AGENT> [query]   ENGINEER | RESEARCHER | BRAINSTORM | PLAN | CRITIQUE
    genesis chat <project>                  multi-turn chat (empty line ends)
    genesis refine <project>                answer proactive questions into the whiteboard
    genesis status <project> <STATUS>       IDEA | IN_PROGRESS | ON_HOLD | COMPLETED
    genesis describe <project> text         replace the project description
    genesis edit <project> [text]           overwrite the whiteboard (reads stdin when no text given)
    genesis export <project>                write the project as Markdown

<project> is a project id or a unique id prefix.
"""

import asyncio
import sys

from genesis.agents.accumulator import ContextAccumulator
from genesis.agents.dispatcher import AgentDispatcher, ChatHistory
from genesis.config import get_config
from genesis.graph import run_quick_genesis
from genesis.ledger import CATEGORIES, NoteLedger, category_for_source, note_category
from genesis.project import new_project, set_description, set_status
from genesis.state import ALL_CATEGORIES, Project
from genesis.utils.formatter import write_project
from genesis.utils.store import JsonStore, ProjectRepository
from genesis.utils.validator import validate_input
from genesis.wizard import DEFAULT_NEW_PROJECT_STATUS, WizardController


def _repository() -> ProjectRepository:
    return ProjectRepository(JsonStore(get_config().get("store_path", "./data/genesis.json")))


def _find_project(repository: ProjectRepository, ref: str) -> Project:
    matches = [p for p in repository.list() if p["id"].startswith(ref)]
    if len(matches) != 1:
        raise SystemExit(f"[GENESIS] No unique project matches '{ref}'.")
    return matches[0]


async def _run_wizard(idea: str) -> Project | None:
    """Walk the wizard in the terminal. Ctrl+C cancels without creating a project."""
    wizard = WizardController(_repository())
    wizard.start()
    try:
        while not idea.strip():
            idea = input("What are you building? ")
        print("[GENESIS] Generating scoping questions...")
        if not await wizard.submit_idea(idea):
            return None

        print("\n--- Answer to scope the MVP (leave blank to skip) ---\n")
        for i, question in enumerate(wizard.session["questions"]):
            wizard.set_answer(i, input(f"{i + 1}. {question}\n> ").strip())

        print("[GENESIS] Synthesizing whiteboard...")
        return await wizard.submit_answers()
    except (KeyboardInterrupt, EOFError):
        wizard.cancel()
        print("\n[GENESIS] Wizard cancelled. No project created.")
        return None


async def _quick(idea: str) -> Project:
    state = await run_quick_genesis(validate_input(idea))
    status = get_config().get("new_project_status", DEFAULT_NEW_PROJECT_STATUS)
    return _repository().add(new_project(state["idea"], state["whiteboard"], status))


def cmd_new(args: list[str]) -> None:
    quick = "--quick" in args
    if quick:
        args.remove("--quick")
    idea = " ".join(args)

    if quick:
        project = asyncio.run(_quick(idea))
    else:
        project = asyncio.run(_run_wizard(idea))
    if project:
        print(f"\n[GENESIS] Created project {project['id']}: {project['title']}\n")
        print(project["whiteboard"])


def cmd_list(args: list[str]) -> None:
    for project in _repository().list():
        print(f"{project['id'][:8]}  {project['status']:<12} {project['title']}  ({len(project['notes'])} notes)")


def cmd_show(args: list[str]) -> None:
    project = _find_project(_repository(), args[0])
    category = args[1].upper() if len(args) > 1 else ALL_CATEGORIES
    ledger = NoteLedger(project)
    print(f"# {project['title']} [{project['status']}]\n\n{project['whiteboard']}\n")
    print("  ".join(f"{CATEGORIES.get(c, {}).get('label', c)}: {n}" for c, n in ledger.counts().items()))
    for note in ledger.filter(category):
        print(f"- {note['createdAt']} [{note_category(note)}] {note['content']}")


def cmd_note(args: list[str]) -> None:
    repository = _repository()
    project = _find_project(repository, args[0])
    note = NoteLedger(project).append(" ".join(args[2:]), args[1].upper())
    if note is None:
        print("[GENESIS] Empty note ignored.")
        return
    repository.save(project)
    print(f"[GENESIS] Added {note['category']} note {note['id'][:8]}.")


def cmd_ask(args: list[str]) -> None:
    repository = _repository()
    project = _find_project(repository, args[0])
    agent = args[1].upper()
    query = " ".join(args[2:])

    if agent in ("ENGINEER", "RESEARCHER"):
        result = asyncio.run(AgentDispatcher().dispatch(agent, query, project))
    else:
        result = asyncio.run(AgentDispatcher().dispatch("GENERIC", query, project, task=agent))
    print(result)

    if input("\nSave to project? [y/N] ").strip().lower() == "y":
        NoteLedger(project).append(result, category_for_source(agent))
        repository.save(project)


async def _chat_loop(project: Project) -> None:
    dispatcher = AgentDispatcher()
    history = ChatHistory()
    while True:
        message = input("you> ").strip()
        if not message:
            return
        print(f"agent> {await dispatcher.chat(message, project, history)}\n")


def cmd_chat(args: list[str]) -> None:
    project = _find_project(_repository(), args[0])
    try:
        asyncio.run(_chat_loop(project))
    except (KeyboardInterrupt, EOFError):
        print()


async def _refine_loop(repository: ProjectRepository, project: Project) -> None:
    accumulator = ContextAccumulator()
    while True:
        recent = NoteLedger(project).recent(get_config().get("recent_notes_limit", 3))
        question = await accumulator.propose_question(project["whiteboard"], recent)
        answer = input(f"{question}\n> ").strip()
        if not answer:
            return
        await accumulator.refine_project(project, question, answer)
        repository.save(project)
        print("[GENESIS] Whiteboard updated.\n")


def cmd_refine(args: list[str]) -> None:
    repository = _repository()
    project = _find_project(repository, args[0])
    try:
        asyncio.run(_refine_loop(repository, project))
    except (KeyboardInterrupt, EOFError):
        print()
    print(project["whiteboard"])


def cmd_status(args: list[str]) -> None:
    repository = _repository()
    project = _find_project(repository, args[0])
    repository.save(set_status(project, args[1].upper()))


def cmd_describe(args: list[str]) -> None:
    repository = _repository()
    project = _find_project(repository, args[0])
    repository.save(set_description(project, validate_input(" ".join(args[1:]), "Description")))


def cmd_edit(args: list[str]) -> None:
    repository = _repository()
    project = _find_project(repository, args[0])
    if len(args) > 1:
        text = " ".join(args[1:])
    else:
        print("Enter the new whiteboard (Ctrl+D / Ctrl+Z to submit):")
        text = sys.stdin.read()
    ContextAccumulator().edit(project, text)
    repository.save(project)
    print("[GENESIS] Whiteboard replaced.")


def cmd_export(args: list[str]) -> None:
    project = _find_project(_repository(), args[0])
    print(f"[GENESIS] Output written to: {write_project(project)}")


COMMANDS = {
    "new": cmd_new,
    "list": cmd_list,
    "show": cmd_show,
    "note": cmd_note,
    "ask": cmd_ask,
    "chat": cmd_chat,
    "refine": cmd_refine,
    "status": cmd_status,
    "describe": cmd_describe,
    "edit": cmd_edit,
    "export": cmd_export,
}


def main() -> None:
    """CLI entry point."""
    args = sys.argv[1:]
    if not args or args[0] not in COMMANDS:
        print(__doc__)
        sys.exit(1)

    try:
        COMMANDS[args[0]](args[1:])
    except (IndexError, ValueError) as exc:
        detail = f" ({exc})" if str(exc) else ""
        print(f"[GENESIS] Invalid arguments{detail}.\n{__doc__}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
