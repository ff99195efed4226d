import logging
import os
import sys

from lua_block_engine import BlockEngine
from lua_errors import LuaFormatError
from lua_reducer import DEFAULT_VERSION, TRIM_WHITESPACE, reduce_tokens
from lua_tokenizer import LuaTokenizer

logger = logging.getLogger(__name__)


def format_lua(source, version: int = DEFAULT_VERSION) -> str:
    """Re-render Lua source with canonical indentation and spacing.

    ``source`` is a string or an iterable of string chunks. Raises a
    ``LuaFormatError`` subclass on lexical, operator or grammar failure.
    """
    if isinstance(source, str):
        source = [source]
    tokenizer = LuaTokenizer()
    for chunk in source:
        tokenizer.feed(chunk)
    tokens = reduce_tokens(tokenizer.finish(), version, trim=TRIM_WHITESPACE)
    logger.debug("formatting %d tokens (lua version flag %d)", len(tokens), version)
    return BlockEngine(tokens).format()


def _usage():
    print("Usage: lua-beautify <file.lua> [-o OUT] [--lua-version N] [--in-place] [--verbose]")
    print("  -o OUT: write the result to OUT (default: formatted_scripts/<name>.fmt.lua)")
    print("  --lua-version N: 1 = base grammar, 2 = goto, 3 = bitwise operators (default: 1)")
    print("  --in-place: overwrite the input file")


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0].startswith("-"):
        _usage()
        return 1

    infile = args.pop(0)
    outfile = None
    version = DEFAULT_VERSION
    in_place = False
    verbose = False
    while args:
        arg = args.pop(0)
        try:
            if arg == "-o":
                outfile = args.pop(0)
            elif arg == "--lua-version":
                version = int(args.pop(0))
            elif arg == "--in-place":
                in_place = True
            elif arg == "--verbose":
                verbose = True
            else:
                print(f"Unknown option '{arg}'")
                _usage()
                return 1
        except (IndexError, ValueError):
            print(f"Invalid {arg} argument")
            return 1

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not os.path.isfile(infile):
        print(f"Error: '{infile}' is not a valid file.")
        return 1

    with open(infile, "r", encoding="utf-8") as f:
        code = f.read()

    try:
        formatted = format_lua(code, version)
    except LuaFormatError as e:
        print(f"{infile}: {e}")
        return 1

    if in_place:
        outfile = infile
    elif outfile is None:
        out_dir = "formatted_scripts"
        os.makedirs(out_dir, exist_ok=True)
        name, _ = os.path.splitext(os.path.basename(infile))
        outfile = os.path.join(out_dir, name + ".fmt.lua")

    with open(outfile, "w", encoding="utf-8") as f:
        f.write(formatted)

    print(f"✓ Formatted → {outfile}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
