"""
dwasm - Dwarf Assembler Command-Line Interface
==============================================

This module implements the command-line interface for the Dwarf assembler.

Usage Examples
--------------
Basic assembly (AAAA:WWWW stream on stdout):
    $ dwasm -f blink.s

Listing with labels, data and source text:
    $ dwasm -l -f blink.s

Write the stream and the symbol table to files:
    $ dwasm -f blink.s -o blink.hex -s blink.sym

Exit Status
-----------
    0   success
    64  usage error (missing or invalid flags)
    65  assembly error or unreadable input file
    70  internal error
"""

from pathlib import Path
from typing import Optional
import logging

import click

from dwarf_sdk import __version__
from dwarf_sdk.assembler import Assembler, AssemblerOptions
from dwarf_sdk.cli.errors import SysexitsCommand, handle_cli_exception

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity. Logs go to stderr."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(cls=SysexitsCommand)
@click.option(
    "-f", "--file", "input_file",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Assembly source file",
)
@click.option(
    "-l", "--list", "listing",
    is_flag=True,
    default=False,
    help="Print a listing (labels, constants, data words, source text) "
         "instead of the plain AAAA:WWWW stream",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the output to a file instead of stdout",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug log on stderr)",
)
@click.version_option(version=__version__, prog_name="dwasm")
def main(
    input_file: Path,
    listing: bool,
    output: Optional[Path],
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble Dwarf source code.

    Prints one AAAA:WWWW line (address:word, hex) per instruction.

    \b
    Examples:
        dwasm -f blink.s              # stream on stdout
        dwasm -l -f blink.s           # listing
        dwasm -f blink.s -o blink.hex # stream to file

    The DWARF_ASM_LISTING and DWARF_ASM_RESET_VECTOR environment
    variables provide defaults; flags take precedence.
    """
    setup_logging(verbose)

    options = AssemblerOptions.from_env()
    if listing:
        options.listing = True

    asm = Assembler(options)

    try:
        logger.debug(f"Assembling {input_file}")
        asm.assemble_file(input_file)

        # Only a complete run produces output
        if output:
            asm.write_output(output)
            logger.debug(f"Wrote {len(asm.get_words())} words to {output}")
        else:
            click.echo(asm.get_output(), nl=False)

        if symbols:
            asm.write_symbols(symbols)
            logger.debug(f"Wrote {len(asm.get_symbols())} symbols to {symbols}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
