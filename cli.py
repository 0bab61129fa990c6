import logging
import os
import sys
import traceback

from colorama import Fore, Style, just_fix_windows_console

from ast_nodes import ASTNode
from config import load_config
from errors import SharError
from lexer import Lexer
from parser import Parser
from resolver import ModuleResolver

USAGE = """Usage:
  shar tokens <file.shar>
  shar parse <file.shar>
  shar build <file.shar> [--out <file.js>]
  shar check <file.shar>
  (optional) --debug to show Python traceback and debug logs"""


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_dict(item) for item in node]
    if not isinstance(node, ASTNode):
        return node

    d = {"type": node.__class__.__name__}
    for key, value in vars(node).items():
        if key == "line":
            continue
        d[key] = ast_to_dict(value)
    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)) and v:
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def read_source(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def print_diagnostics(warnings, errors):
    for message in warnings:
        print(f"{Fore.YELLOW}warning:{Style.RESET_ALL} {message}", file=sys.stderr)
    for message in errors:
        print(f"{Fore.RED}error:{Style.RESET_ALL} {message}", file=sys.stderr)


def build(path):
    resolver = ModuleResolver(config=load_config())
    result = resolver.compile_file(path)
    type_warnings = result.type_result.warnings if result.type_result else []
    type_errors = result.type_result.errors if result.type_result else []
    print_diagnostics(result.warnings + type_warnings, type_errors)
    return result


def cmd_tokens(path):
    for tok in Lexer(read_source(path)).tokens():
        print(f"{tok.line}:{tok.column}  {tok!r}")


def cmd_parse(path):
    program = Parser(Lexer(read_source(path))).parse()
    print(pretty(ast_to_dict(program)))


def cmd_build(path, out=None):
    result = build(path)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(result.output)
        print(f"{Fore.GREEN}wrote{Style.RESET_ALL} {out}")
    else:
        print(result.output, end="")
    if result.has_type_errors:
        print(f"{Fore.RED}type errors found; do not run this output{Style.RESET_ALL}", file=sys.stderr)
        return 1
    return 0


def cmd_check(path):
    result = build(path)
    if result.type_result is None:
        print(f"no type spec found for {path}")
        return 0
    if result.has_type_errors:
        return 1
    print(f"{Fore.GREEN}ok{Style.RESET_ALL}")
    return 0


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    just_fix_windows_console()

    debug = False
    if "--debug" in argv:
        debug = True
        argv.remove("--debug")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[shar] %(levelname)s %(name)s: %(message)s",
    )

    out = None
    if "--out" in argv:
        i = argv.index("--out")
        if i + 1 >= len(argv):
            print("--out expects a path")
            return 1
        out = argv[i + 1]
        del argv[i:i + 2]

    if len(argv) != 2:
        print(USAGE)
        return 1

    cmd, path = argv
    if not os.path.isfile(path):
        print(f"{Fore.RED}error:{Style.RESET_ALL} file not found: {path}", file=sys.stderr)
        return 1

    try:
        if cmd == "tokens":
            cmd_tokens(path)
            return 0
        if cmd == "parse":
            cmd_parse(path)
            return 0
        if cmd == "build":
            return cmd_build(path, out=out)
        if cmd == "check":
            return cmd_check(path)
    except (SharError, OSError) as e:
        if debug:
            traceback.print_exc()
        else:
            print(f"{Fore.RED}error:{Style.RESET_ALL} {e}", file=sys.stderr)
        return 1

    print(f"Unknown command: {cmd}")
    print(USAGE)
    return 1


if __name__ == "__main__":
    sys.exit(main())
