# tests/core/test_option_scanner.py
from xrun.core import xngine
from xrun.core.handlers import lint_handler
from xrun.core.option_scanner import scan_module, scan_options

SOURCE = [
    "def x_build(args, ctx):",                 # 1
    "    for arg in args:",                    # 2
    "        match arg:",                      # 3
    '            case "--x-release":',         # 4
    "                # Optimised build.",      # 5
    "                pass",                    # 6
    '            case "--x-build-all":',       # 7
    "                # Every target.",         # 8
    "                pass",                    # 9
    "",                                        # 10
    "def x_bench(args, ctx):",                 # 11
    "    match args[0]:",                      # 12
    "        case '--x-build-all':",           # 13
    "            # Bench every target.",       # 14
    "            pass",                        # 15
    "",                                        # 16
    "match argv[0]:",                          # 17
    '    case "--x-no-confirmation":',         # 18
    "        # Say yes.",                      # 19
    '    case "--x-no-confirmation":',         # 20
    "        pass",                            # 21
]

OWNERS = {"build": (1, 9), "bench": (11, 15)}


def test_flags_are_owned_by_enclosing_command():
    flags = {(f.name, f.owner) for f in scan_options(SOURCE, OWNERS)}

    assert ("--x-release", "build") in flags
    assert ("--x-build-all", "build") in flags
    assert ("--x-build-all", "bench") in flags
    assert ("--x-no-confirmation", None) in flags


def test_flag_outside_commands_is_global():
    flags = scan_options(SOURCE, OWNERS)
    global_flags = [f for f in flags if f.owner is None]

    assert [f.name for f in global_flags] == ["--x-no-confirmation"]


def test_repeated_clause_is_taken_once():
    flags = scan_options(SOURCE, OWNERS)
    names = [f.name for f in flags if f.owner is None]

    assert names.count("--x-no-confirmation") == 1
    # Docs come from the first clause.
    assert [f for f in flags if f.owner is None][0].doc_lines == ["Say yes."]


def test_trailing_docs_are_attached():
    flags = {(f.name, f.owner): f for f in scan_options(SOURCE, OWNERS)}

    assert flags[("--x-release", "build")].doc_lines == ["Optimised build."]
    assert flags[("--x-build-all", "bench")].doc_lines == ["Bench every target."]


def test_scan_is_sorted_and_deterministic():
    first = scan_options(SOURCE, OWNERS)
    second = scan_options(SOURCE, OWNERS)

    assert first == second
    assert [f.key for f in first] == sorted(f.key for f in first)


def test_non_clause_mentions_are_ignored():
    lines = ['print("--x-fake")', 'if arg == "--x-other":']
    assert scan_options(lines, {}) == []


def test_scan_module_uses_handler_ranges():
    handlers = {"lint": lint_handler.x_lint, "fmt": lint_handler.x_fmt}
    flags = {(f.name, f.owner): f for f in scan_module(lint_handler, handlers)}

    assert set(flags) == {("--x-check", "fmt"), ("--x-fix", "lint")}
    assert flags[("--x-check", "fmt")].doc_lines == [
        "Only report files that would change.",
        "·",
        "Exits non-zero when any would.",
    ]


HELPER_SOURCE = [
    "def _parse(args):",                       # 1
    "    for arg in args:",                    # 2
    "        match arg:",                      # 3
    '            case "--x-verbose":',         # 4
    "                # Chatty output.",        # 5
    "                pass",                    # 6
    "",                                        # 7
    "def x_build(args, ctx):",                 # 8
    "    _parse(args)",                        # 9
    "    match args[0]:",                      # 10
    '        case "--x-release":',             # 11
    "            pass",                        # 12
]


def test_helper_clause_in_handler_module_is_not_global():
    flags = scan_options(HELPER_SOURCE, {"build": (8, 12)}, allow_global=False)

    assert [(f.name, f.owner) for f in flags] == [("--x-release", "build")]


def test_scan_module_never_yields_global_flags_for_handler_modules():
    handlers = {"lint": lint_handler.x_lint}
    flags = scan_module(lint_handler, handlers)

    # x_fmt is not passed as a handler, so its clause has no owner and is dropped.
    assert [(f.name, f.owner) for f in flags] == [("--x-fix", "lint")]


def test_global_flag_module_yields_no_confirmation():
    flags = scan_module(xngine, {}, allow_global=True)

    assert [(f.name, f.owner) for f in flags] == [("--x-no-confirmation", None)]
