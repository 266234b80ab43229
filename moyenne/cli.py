"""
CLI (Command Line Interface).

This module provides quick terminal commands, e.g.:

    moyenne show
    moyenne modules
    moyenne require --target 12 mod-analyse-3 mod-proba-2
    moyenne generate --target 12 --out s3.json mod-analyse-3 mod-proba-2
    moyenne react --target 12
    moyenne chat "kifach nhseb la moyenne?"
    moyenne interactive

Grades come from a semester file (--grades FILE, same shape as the catalog entries).
Without it, the catalog semester is used with no grades entered.

Note:
- The interactive UI lives in moyenne/interactive.py
- This CLI prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from moyenne.assistant import make_assistant
from moyenne.averages import color_of, module_average, semester_average, ue_average
from moyenne.catalog import CatalogError, load_catalog, load_semester_file, save_semester_file
from moyenne.config import AssistantConfig, load_config
from moyenne.model import as_grade
from moyenne.session import Session

try:
    from rich.logging import RichHandler

    HAS_RICH = True
except Exception:  # pragma: no cover
    HAS_RICH = False


def setup_logging(level_name: str) -> None:
    """
    Configure the root logger once for CLI runs.
    """
    level = getattr(logging, level_name.upper(), logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING

    if HAS_RICH:
        handler: logging.Handler = RichHandler(show_path=False)
        fmt = "%(message)s"
    else:
        handler = logging.StreamHandler()
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(level=level, format=fmt, handlers=[handler])


def _fmt(x: Optional[float]) -> str:
    return "--" if x is None else f"{x:.2f}"


def _build_session(args: argparse.Namespace, cfg: AssistantConfig) -> Session:
    """
    Load catalog (+ optional grade file) and pick the active semester.

    Raises CatalogError / KeyError on bad input.
    """
    semesters = load_catalog(args.catalog)
    session = Session(semesters, active_id=args.semester, synthesis_attempts=cfg.synthesis_attempts)
    if args.grades:
        session.replace_active(load_semester_file(args.grades))
    return session


def _apply_selection(session: Session, module_ids: list[str]) -> list[str]:
    """
    Select modules by id. Returns unknown ids (nothing is selected for those).
    """
    unknown: list[str] = []
    for mid in module_ids:
        mid = mid.strip()
        if not mid:
            continue
        if session.active.find_module(mid) is None:
            unknown.append(mid)
        elif mid not in session.selected:
            session.toggle(mid)
    return unknown


def _cmd_show(session: Session) -> int:
    """
    Print module, UE and semester averages.
    """
    semester = session.active
    print(f"{semester.name} ({semester.id})")
    for ue in semester.ues:
        print(f"\n{ue.name} [coef {ue.coefficient:g}] -> {_fmt(ue_average(ue))}")
        for m in ue.modules:
            cc = _fmt(m.cc) if m.has_cc else "  "
            print(
                f"  {m.id:<18} {m.name:<34} coef {m.coefficient:g} | "
                f"CC {cc:>5} | Exam {_fmt(m.exam):>5} | Moy {_fmt(module_average(m)):>5}"
            )

    current = session.current_average()
    print(f"\nMoyenne semestre: {_fmt(current)} ({color_of(current)})")
    return 0


def _cmd_modules(session: Session) -> int:
    for m in session.active.modules():
        print(f"{m.id} | {m.name} | {m.type.value}")
    return 0


def _cmd_require(args: argparse.Namespace, session: Session) -> int:
    """
    Print the average the selected modules need.
    """
    session.set_target(args.target)

    unknown = _apply_selection(session, args.modules)
    if unknown:
        print(f"Unknown module(s): {', '.join(unknown)}")
        return 1

    result = session.requirements()
    if result is None:
        print("Nothing to compute: select at least one module.")
        return 1

    print(f"Target: {session.desired_average:.2f}")
    print(f"Required average (selected modules): {_fmt(result.overall_required)}")
    for mid, req in result.per_module.items():
        print(f"  {mid}: {req:.2f}")
    print("Feasible." if result.feasible else "Objective not reachable with current selection.")
    return 0


def _cmd_generate(args: argparse.Namespace, session: Session) -> int:
    """
    Generate concrete grades for the selected modules.
    """
    session.set_target(args.target)

    unknown = _apply_selection(session, args.modules)
    if unknown:
        print(f"Unknown module(s): {', '.join(unknown)}")
        return 1
    if not session.selected:
        print("Please provide at least one module id.")
        return 1

    if args.attempts is not None:
        session.synthesis_attempts = max(1, args.attempts)
    if args.seed is not None:
        session.rng.seed(args.seed)

    if not session.generate():
        print("Objective not reachable with current selection.")
        return 1

    for mid in sorted(session.selected):
        m = session.active.find_module(mid)
        if m is None:
            continue
        cc = f"CC {_fmt(m.cc)} | " if m.has_cc else ""
        print(f"{m.id}: {cc}Exam {_fmt(m.exam)}")
    print(f"Moyenne semestre: {_fmt(session.current_average())}")

    out_path = (args.out or "").strip()
    if out_path:
        save_semester_file(session.active, out_path)
        print(f"Saved to: {out_path}")
    return 0


def _cmd_react(args: argparse.Namespace, session: Session, cfg: AssistantConfig) -> int:
    if args.target is not None:
        session.set_target(args.target)

    unknown = _apply_selection(session, args.modules)
    if unknown:
        print(f"Unknown module(s): {', '.join(unknown)}")
        return 1

    assistant = make_assistant(cfg)
    print(assistant.generate_reaction(session.current_average(), session.desired_average, session.is_feasible()))
    return 0


def _cmd_chat(args: argparse.Namespace, session: Session, cfg: AssistantConfig) -> int:
    message = (args.message or "").strip()
    if not message:
        print("Please provide a message.")
        return 1

    assistant = make_assistant(cfg)
    print(assistant.chat(message, [], session.active))
    return 0


def _target_arg(text: str) -> float:
    value = as_grade(text)
    if value is None:
        raise argparse.ArgumentTypeError(f"not a grade between 0 and 20: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="moyenne", description="Moyenne Calculator CLI")
    parser.add_argument("--semester", "-s", type=str, default=None, help="Semester id (e.g. sem3, sem4)")
    parser.add_argument("--grades", "-g", type=str, default=None, help="Semester JSON file with grades")
    parser.add_argument("--catalog", type=str, default=None, help="Alternative catalog JSON file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Show averages")
    sub.add_parser("modules", help="List module ids of the semester")

    p_require = sub.add_parser("require", help="Average the selected modules need to reach a target")
    p_require.add_argument("--target", "-t", type=_target_arg, required=True, help="Desired semester average")
    p_require.add_argument("modules", nargs="+", help="Module ids to simulate")

    p_generate = sub.add_parser("generate", help="Generate grades for selected modules that hit a target")
    p_generate.add_argument("--target", "-t", type=_target_arg, required=True, help="Desired semester average")
    p_generate.add_argument("--attempts", type=int, default=None, help="Attempts before giving up")
    p_generate.add_argument("--seed", type=int, default=None, help="Random seed (reproducible output)")
    p_generate.add_argument("--out", type=str, default=None, help="Write the resulting semester to this file")
    p_generate.add_argument("modules", nargs="+", help="Module ids to fill in")

    p_react = sub.add_parser("react", help="Motivational reaction for the current situation")
    p_react.add_argument("--target", "-t", type=_target_arg, default=None, help="Desired semester average")
    p_react.add_argument("modules", nargs="*", help="Module ids to simulate")

    p_chat = sub.add_parser("chat", help="Ask the assistant a question")
    p_chat.add_argument("message", type=str, help="Message text")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = load_config()
    setup_logging(cfg.log_level)

    try:
        session = _build_session(args, cfg)
    except (CatalogError, KeyError) as e:
        print(f"Error: {e}")
        raise SystemExit(1)

    if args.command == "show":
        raise SystemExit(_cmd_show(session))
    if args.command == "modules":
        raise SystemExit(_cmd_modules(session))
    if args.command == "require":
        raise SystemExit(_cmd_require(args, session))
    if args.command == "generate":
        raise SystemExit(_cmd_generate(args, session))
    if args.command == "react":
        raise SystemExit(_cmd_react(args, session, cfg))
    if args.command == "chat":
        raise SystemExit(_cmd_chat(args, session, cfg))

    if args.command == "interactive":
        from moyenne.interactive import run_interactive

        run_interactive(session, make_assistant(cfg))
        raise SystemExit(0)

    raise SystemExit(2)
