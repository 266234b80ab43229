from __future__ import annotations

from typing import Optional

from moyenne import config
from moyenne.assistant import Assistant
from moyenne.averages import color_of, module_average, ue_average
from moyenne.model import Module
from moyenne.session import Session

# Optional rich
try:
    from rich.console import Console
    from rich.table import Table
    from rich import box

    HAS_RICH = True
    console = Console()
except Exception:  # pragma: no cover
    HAS_RICH = False
    console = None


RICH_COLORS = {"red": "red", "orange": "dark_orange", "green": "green", "neutral": "dim"}


def _println(msg: str = "") -> None:
    if HAS_RICH:
        console.print(msg)
    else:
        print(msg)


def _prompt(msg: str) -> str:
    if HAS_RICH:
        return console.input(msg)
    return input(msg)


def _fmt(x: Optional[float]) -> str:
    return "--" if x is None else f"{x:.2f}"


def _colored(x: Optional[float]) -> str:
    if not HAS_RICH:
        return _fmt(x)
    return f"[{RICH_COLORS[color_of(x)]}]{_fmt(x)}[/]"


def run_interactive(session: Session, assistant: Assistant) -> None:
    """
    Interactive menu loop over one session.
    """
    history: list[dict[str, str]] = []

    while True:
        _print_header(session)

        choice = _prompt(
            "\n[1] Show grades\n"
            "[2] Enter a grade\n"
            "[3] Set desired average\n"
            "[4] Select / unselect modules\n"
            "[5] Required averages\n"
            "[6] Generate grades for selection\n"
            "[7] Reaction\n"
            "[8] Chat\n"
            "[9] Switch semester\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_show(session)
        elif choice == "2":
            _flow_enter_grade(session)
        elif choice == "3":
            _flow_target(session)
        elif choice == "4":
            _flow_select(session)
        elif choice == "5":
            _flow_requirements(session)
        elif choice == "6":
            _flow_generate(session)
        elif choice == "7":
            _println(
                assistant.generate_reaction(session.current_average(), session.desired_average, session.is_feasible())
            )
        elif choice == "8":
            _flow_chat(session, assistant, history)
        elif choice == "9":
            _flow_switch(session)
            history.clear()
        else:
            _println("Invalid choice.")


def _print_header(session: Session) -> None:
    current = session.current_average()
    _println(f"\n=== Moyenne Calculator - {session.active.name} ===")
    _println(
        f"Moyenne: {_colored(current)} | Objectif: {_fmt(session.desired_average)} | "
        f"Selected modules: {len(session.selected)}"
    )


def _pick_module(session: Session, title: str) -> Optional[Module]:
    modules = session.active.modules()
    for i, m in enumerate(modules, start=1):
        mark = "*" if m.id in session.selected else " "
        _println(f"{i:>2}){mark} {m.name} ({m.type.value})")

    pick = _prompt(f"{title} [blank = back]: ").strip()
    if not pick:
        return None
    if not pick.isdigit() or not (1 <= int(pick) <= len(modules)):
        _println("Out of range.")
        return None
    return modules[int(pick) - 1]


def _flow_show(session: Session) -> None:
    semester = session.active
    result = session.requirements()
    needed = result.per_module if result is not None else {}

    if HAS_RICH:
        for ue in semester.ues:
            table = Table(title=f"{ue.name} (coef {ue.coefficient:g}) -> {_fmt(ue_average(ue))}", box=box.SIMPLE)
            table.add_column("Module")
            table.add_column("Coef", justify="right")
            table.add_column("CC", justify="right")
            table.add_column("Exam", justify="right")
            table.add_column("Moy", justify="right")
            table.add_column("Needed", justify="right")
            for m in ue.modules:
                name = f"[bold cyan]{m.name}[/]" if m.id in session.selected else m.name
                table.add_row(
                    name,
                    f"{m.coefficient:g}",
                    _fmt(m.cc) if m.has_cc else "",
                    _fmt(m.exam),
                    _colored(module_average(m)),
                    _fmt(needed.get(m.id)) if m.id in needed else "",
                )
            console.print(table)
        return

    for ue in semester.ues:
        _println(f"\n{ue.name} (coef {ue.coefficient:g}) -> {_fmt(ue_average(ue))}")
        for m in ue.modules:
            cc = f"CC {_fmt(m.cc)} | " if m.has_cc else ""
            extra = f" | needed {needed[m.id]:.2f}" if m.id in needed else ""
            _println(f"  - {m.name}: {cc}Exam {_fmt(m.exam)} | Moy {_fmt(module_average(m))}{extra}")


def _flow_enter_grade(session: Session) -> None:
    while True:
        module = _pick_module(session, "Module number")
        if module is None:
            return

        fields = ["cc", "exam"] if module.has_cc else ["exam"]
        for field in fields:
            current = getattr(module, field)
            raw = _prompt(f"{field.upper()} [{_fmt(current)}] (blank = keep, '-' = clear): ").strip()
            if not raw:
                continue
            try:
                session.set_grade(module.id, field, None if raw == "-" else raw)
            except ValueError as e:
                _println(str(e))

        more = _prompt("Enter another grade? [Y/n]: ").strip().lower()
        if more == "n":
            return


def _flow_target(session: Session) -> None:
    raw = _prompt(f"Desired average [{_fmt(session.desired_average)}] (blank = clear): ").strip()
    if not raw:
        session.desired_average = None
        _println("Objective cleared.")
        return
    if session.set_target(raw) is None:
        _println("Target must be a number between 0 and 20.")


def _flow_select(session: Session) -> None:
    while True:
        module = _pick_module(session, "Toggle module number")
        if module is None:
            return
        now = session.toggle(module.id)
        _println(f"{'Selected' if now else 'Unselected'}: {module.name}")


def _flow_requirements(session: Session) -> None:
    if session.desired_average is None:
        _println("Set a desired average first.")
        return
    result = session.requirements()
    if result is None:
        _println("Select at least one module.")
        return

    _println(f"Required average for selected modules: {_fmt(result.overall_required)}")
    for mid, req in result.per_module.items():
        m = session.active.find_module(mid)
        _println(f"  - {m.name if m else mid}: {req:.2f}")
    if not result.feasible:
        _println("Objective not reachable with current selection.")


def _flow_generate(session: Session) -> None:
    if session.desired_average is None or not session.selected:
        _println("Set a desired average and select modules first.")
        return
    if session.generate():
        _println(f"Grades generated. New average: {_colored(session.current_average())}")
        _flow_show(session)
    else:
        _println("Objective not reachable with current selection. Try again or select more modules.")


def _flow_chat(session: Session, assistant: Assistant, history: list[dict[str, str]]) -> None:
    while True:
        message = _prompt("You [blank = back]: ").strip()
        if not message:
            return
        answer = assistant.chat(message, history, session.active)
        history.append({"role": "user", "content": message})
        history.append({"role": "assistant", "content": answer})
        del history[: -config.CHAT_HISTORY_LIMIT]
        _println(f"Assistant: {answer}")


def _flow_switch(session: Session) -> None:
    semesters = session.semesters
    for i, s in enumerate(semesters, start=1):
        _println(f"{i}) {s.name}")
    pick = _prompt("Semester number [blank = back]: ").strip()
    if pick and pick.isdigit() and 1 <= int(pick) <= len(semesters):
        session.switch(semesters[int(pick) - 1].id)
