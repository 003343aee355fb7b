from formula.formula_cli import render_json, token_to_dict
from formula.formula_errors import FormulaError
from formula.formula_lexer import Lexer
from formula.formula_parser import Parser
from formula.formula_token import TRIVIA


def read_source() -> str | None:
    """
    Reads one REPL entry, continuing with ``... `` while braces are open.

    Returns None when the user asks to leave.
    """
    src_lines: list[str] = []
    depth = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        depth += (
            line.count("{") + line.count("(") + line.count("[")
            - line.count("}") - line.count(")") - line.count("]")
        )
        if depth <= 0:
            return "\n".join(src_lines)


def evaluate(src: str, show_tokens: bool = False) -> str:
    """Parses (or lexes) one entry and returns the text to print."""
    try:
        if show_tokens:
            lexer = Lexer(src, ignore=TRIVIA)
            return render_json([token_to_dict(tok, src) for tok in lexer])
        return render_json(Parser(Lexer(src)).parse().to_dict(), pretty=True)
    except FormulaError as err:
        return "[error] >>>\n" + err.render(src)


def start_repl(show_tokens: bool = False) -> None:
    print("Formula REPL. Type ':tokens' to toggle token mode, 'exit' or 'quit' to leave.")

    while True:
        try:
            src = read_source()
            if src is None:
                print("Exiting Formula REPL.")
                return
            if not src.strip():
                continue
            if src.strip() == ":tokens":
                show_tokens = not show_tokens
                print(f"[mode] >>> Token mode {'ON' if show_tokens else 'OFF'}")
                continue
            print(evaluate(src, show_tokens))
        except (KeyboardInterrupt, EOFError):
            print("\nExiting Formula REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
