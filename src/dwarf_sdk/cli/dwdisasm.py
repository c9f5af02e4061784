"""
dwdisasm - Dwarf Disassembler Command-Line Interface
====================================================

Reads an AAAA:WWWW word stream, as printed by dwasm, and shows the
instruction each word encodes.

Usage Examples
--------------
Disassemble a stream file:
    $ dwdisasm blink.hex

Straight from the assembler:
    $ dwasm -f blink.s | dwdisasm

Annotate branch targets from a symbol file:
    $ dwdisasm blink.hex -s blink.sym
"""

from pathlib import Path
from typing import Optional
import re

import click

from dwarf_sdk import __version__
from dwarf_sdk.cli.errors import SysexitsCommand, handle_cli_exception
from dwarf_sdk.disassembler import DwarfDisassembler, parse_word_stream


# "name = $XXXX ; kind" lines of a dwasm symbol file
_SYMBOL_LINE_RE = re.compile(r"^(\S+)\s*=\s*\$([0-9A-Fa-f]{4})\s*;\s*label\s*$")


def read_label_file(path: Path) -> dict[int, str]:
    """Load label addresses from a dwasm symbol file (address -> name)."""
    labels: dict[int, str] = {}
    for line in path.read_text().splitlines():
        match = _SYMBOL_LINE_RE.match(line)
        if match:
            labels.setdefault(int(match.group(2), 16), match.group(1))
    return labels


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(cls=SysexitsCommand)
@click.argument(
    "input_file",
    type=click.File("r"),
    default="-",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Symbol file from dwasm -s, used to annotate branch targets",
)
@click.version_option(version=__version__, prog_name="dwdisasm")
def main(
    input_file,
    output: Optional[Path],
    symbols: Optional[Path],
) -> None:
    """
    Disassemble a Dwarf AAAA:WWWW word stream.

    INPUT_FILE defaults to standard input.
    """
    try:
        disasm = DwarfDisassembler()
        if symbols:
            disasm.add_symbols(read_label_file(symbols))

        words = parse_word_stream(input_file.read())
        text = disasm.disassemble_to_text(words)

        if output:
            output.write_text(text + "\n" if text else "")
        elif text:
            click.echo(text)

    except Exception as e:
        handle_cli_exception(e, error_type="Disassembly")


if __name__ == "__main__":
    main()
