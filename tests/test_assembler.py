# =============================================================================
# test_assembler.py - Two-Pass Assembler Tests
# =============================================================================
# End-to-end tests for the Dwarf assembler driver.
#
# Test coverage includes:
#   - Compact and listing output
#   - Labels, forward references and the shared symbol namespace
#   - Constant, data and origin directives
#   - Program counter wrap-around and the reset vector
#   - Options from environment variables
#   - File I/O and symbol file output
# =============================================================================

import pytest

from dwarf_sdk.assembler import (
    Assembler,
    AssemblerOptions,
    EmittedWord,
    assemble,
    assemble_file,
)
from dwarf_sdk.errors import (
    AssemblerError,
    DuplicateSymbolError,
    InvalidLiteralError,
    MissingOperandError,
    SourceFileError,
    UndefinedSymbolError,
    UnknownMnemonicError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def compact(source: str) -> list[str]:
    """Assemble and return the compact output lines."""
    asm = Assembler()
    asm.assemble(source)
    return asm.get_output_lines()


def listing(source: str) -> list[str]:
    """Assemble and return the listing output lines."""
    asm = Assembler(listing=True)
    asm.assemble(source)
    return asm.get_output_lines()


# =============================================================================
# Basic Output Tests
# =============================================================================

class TestBasicOutput:
    """Test the simplest programs."""

    def test_mov(self):
        """A two-register move."""
        assert assemble("mov r1 r2\n") == "0000:0312\n"

    def test_addi(self):
        """A register plus signed immediate."""
        assert assemble("addi r0, 5\n") == "0000:7005\n"

    def test_empty_source(self):
        """No source, no output."""
        assert assemble("") == ""

    def test_comments_and_blank_lines(self):
        """Comment-only and blank lines emit nothing and take no space."""
        source = "; header\n\n   \nnop ; idle ; really\n"
        assert compact(source) == ["0000:0000"]

    def test_addresses_advance_by_two(self):
        """Each instruction occupies one 16-bit word."""
        assert compact("nop\nnop\nnop\n") == ["0000:0000", "0002:0000", "0004:0000"]

    def test_emitted_words(self):
        """assemble() returns word records with source line numbers."""
        words = Assembler().assemble("\nmov r1 r2\n")
        assert words == [EmittedWord(0, 0x0312, 2, "instruction")]
        assert str(words[0]) == "0000:0312"

    def test_deterministic(self):
        """Assembling the same source twice gives identical output."""
        source = "start: addi r1, 1\nbrl start\n$ 1, 2\n"
        asm = Assembler()
        first = asm.assemble(source)
        first_output = asm.get_output()
        assert asm.assemble(source) == first
        assert asm.get_output() == first_output


# =============================================================================
# Listing Tests
# =============================================================================

class TestListing:
    """Test the listing output form."""

    def test_label_listing(self):
        """Labels get their own line, instructions carry their source."""
        assert listing("loop: nop\n    brr r0\n") == [
            "\t\tloop:",
            "0000:0000\tloop: nop",
            "0002:0900\t    brr r0",
        ]

    def test_constant_listing(self):
        """Constants are shown with their literal text."""
        assert listing(".count 0x3\naddi r1, count\n") == [
            "\t\tcount 0x3",
            "0000:7103\taddi r1, count",
        ]

    def test_source_keeps_comment(self):
        """The full source line, comment included, follows the word."""
        assert listing("nop ; idle\n") == ["0000:0000\tnop ; idle"]

    def test_listing_from_options(self):
        """AssemblerOptions.listing selects the listing form."""
        asm = Assembler(AssemblerOptions(listing=True))
        asm.assemble("x: nop\n")
        assert asm.listing
        assert asm.get_output_lines()[0] == "\t\tx:"

    def test_listing_flag_does_not_mutate_options(self):
        """The listing shortcut leaves the caller's options alone."""
        options = AssemblerOptions()
        Assembler(options, listing=True)
        assert options.listing is False


# =============================================================================
# Label Tests
# =============================================================================

class TestLabels:
    """Test label definition and reference."""

    def test_forward_reference(self):
        """Labels may be used before they are defined."""
        assert compact("brl target\nnop\ntarget: nop\n") == [
            "0000:F002",
            "0002:0000",
            "0004:0000",
        ]

    def test_backward_reference(self):
        """Labels defined earlier resolve too."""
        assert compact("nop\nloop: nop\nbrl loop\n")[-1] == "0004:F001"

    def test_label_on_own_line(self):
        """A label alone takes the address of the next word."""
        asm = Assembler()
        asm.assemble("nop\nhere:\nnop\n")
        assert asm.get_symbols() == {"here": 2}

    def test_trailing_label(self):
        """A label after the last word gets the end address."""
        asm = Assembler()
        asm.assemble("nop\nnop\nend:\n")
        assert asm.get_symbols()["end"] == 4

    def test_several_labels_on_one_line(self):
        """Labels can be stacked in front of a statement."""
        asm = Assembler()
        asm.assemble("nop\na: b: nop\n")
        assert asm.get_symbols() == {"a": 2, "b": 2}

    def test_label_in_immediate_slot(self):
        """Labels can be loaded as immediates."""
        source = "@0x1200\ndata: nop\nldu r1, data\n"
        assert compact(source)[-1] == "1202:1112"

    def test_duplicate_label(self):
        """Redefining a label is fatal."""
        with pytest.raises(DuplicateSymbolError) as exc_info:
            compact("foo: nop\nfoo: nop\n")
        assert exc_info.value.location.line == 2
        assert exc_info.value.original_location.line == 1

    def test_label_constant_collision(self):
        """Labels and constants share one namespace."""
        with pytest.raises(DuplicateSymbolError):
            compact("foo: nop\n.foo 1\n")
        with pytest.raises(DuplicateSymbolError):
            compact(".foo 1\nfoo: nop\n")

    def test_empty_label(self):
        """A bare colon names nothing."""
        with pytest.raises(AssemblerError, match="empty symbol name"):
            compact(": nop\n")

    def test_undefined_symbol(self):
        """References to unknown symbols fail on the emission pass."""
        with pytest.raises(UndefinedSymbolError) as exc_info:
            compact("nop\nbrl nowhere\n")
        error = exc_info.value
        assert error.symbol == "nowhere"
        assert (error.location.line, error.location.column) == (2, 5)
        assert "<input>:2:5" in str(error)

    def test_collect_symbols(self):
        """The collection pass alone finds the same addresses."""
        source = "start: nop\n@0x40\nmid: nop\n.k 9\n$ 1, 2\nend: nop\n"
        asm = Assembler()
        asm.assemble(source)
        assert asm.collect_symbols(source) == asm.get_symbols()
        assert asm.get_symbols() == {"start": 0, "mid": 0x40, "k": 9, "end": 0x46}

    def test_collect_ignores_undefined(self):
        """Undefined immediates are not noticed by the collection pass."""
        assert Assembler().collect_symbols("brl nowhere\nx: nop\n") == {"x": 2}


# =============================================================================
# Directive Tests
# =============================================================================

class TestConstants:
    """Test the '.name value' directive."""

    def test_constant_value(self):
        """Constants are usable as immediates and take no space."""
        assert compact(".five 5\naddi r0, five\n") == ["0000:7005"]

    def test_negative_constant(self):
        """Negative constants wrap to 16 bits."""
        asm = Assembler()
        asm.assemble(".m -1\n")
        assert asm.get_symbols() == {"m": 0xFFFF}

    def test_constant_needs_literal(self):
        """Constant values are never symbol references."""
        with pytest.raises(InvalidLiteralError):
            compact(".a 1\n.b a\n")

    def test_constant_needs_value(self):
        """A constant without a value is an error."""
        with pytest.raises(MissingOperandError):
            compact(".a\n")

    def test_empty_constant_name(self):
        """A bare dot names nothing."""
        with pytest.raises(AssemblerError, match="empty symbol name"):
            compact(". 5\n")


class TestData:
    """Test the '$ items...' directive."""

    def test_data_not_in_compact_output(self):
        """Data words take space but only instructions are printed."""
        asm = Assembler()
        words = asm.assemble("$ 1, 2\nnop\n")
        assert asm.get_output_lines() == ["0004:0000"]
        assert [(w.address, w.value, w.kind) for w in words] == [
            (0, 1, "data"),
            (2, 2, "data"),
            (4, 0, "instruction"),
        ]

    def test_data_listing(self):
        """Listing shows each data word, wrapped in blank lines."""
        assert listing('$ "AB", 0x10\n') == [
            "",
            "0000 0041\t\t'A'",
            "0002 0042\t\t'B'",
            "0004 0010\t\t0x10",
            "",
        ]

    def test_string_keeps_spaces(self):
        """Each character of a string is one word, spaces included."""
        words = Assembler().assemble('$ "a b"\n')
        assert [w.value for w in words] == [0x61, 0x20, 0x62]

    def test_empty_string(self):
        """An empty string emits nothing."""
        assert Assembler().assemble('$ ""\n') == []

    def test_label_on_data(self):
        """Labels in front of data take the first word's address."""
        asm = Assembler()
        asm.assemble('nop\nmsg: $ "hi"\nafter: nop\n')
        assert asm.get_symbols() == {"msg": 2, "after": 6}

    def test_invalid_number(self):
        """Data numbers must be literals."""
        with pytest.raises(InvalidLiteralError):
            compact("$ 1, two\n")

    def test_unterminated_string(self):
        """Strings need their closing quote."""
        with pytest.raises(InvalidLiteralError, match="missing closing quote"):
            compact('$ "abc\n')


class TestOrigin:
    """Test the '@address' directive."""

    def test_origin(self):
        """The program counter moves to the given address."""
        assert compact("@0x100\nnop\n") == ["0100:0000"]

    def test_origin_with_space(self):
        """The address may be a separate token."""
        assert compact("@ 0x100\nnop\n") == ["0100:0000"]

    def test_origin_backwards(self):
        """The counter can also move back."""
        assert compact("@0x10\nnop\n@0x4\nnop\n") == ["0010:0000", "0004:0000"]

    def test_origin_invalid(self):
        """The address must be a literal."""
        with pytest.raises(InvalidLiteralError):
            compact("@start\n")

    def test_origin_missing(self):
        """A bare '@' is an error."""
        with pytest.raises(MissingOperandError):
            compact("@\n")


# =============================================================================
# Program Counter Tests
# =============================================================================

class TestProgramCounter:
    """Test program counter behavior."""

    def test_wraps_at_64k(self):
        """The counter wraps from $FFFE to $0000."""
        assert compact("@0xFFFE\nnop\nnop\n") == ["FFFE:0000", "0000:0000"]

    def test_reset_vector(self):
        """Both passes start at the configured reset vector."""
        asm = Assembler(AssemblerOptions(reset_vector=0x0200))
        asm.assemble("start: nop\nbrl start\n")
        assert asm.get_output_lines() == ["0200:0000", "0202:F100"]

    def test_from_env(self, monkeypatch):
        """Options can come from the environment."""
        monkeypatch.setenv("DWARF_ASM_LISTING", "yes")
        monkeypatch.setenv("DWARF_ASM_RESET_VECTOR", "0x40")
        options = AssemblerOptions.from_env()
        assert options.listing is True
        assert options.reset_vector == 0x40

    def test_from_env_defaults(self, monkeypatch):
        """Missing or invalid variables leave the defaults."""
        monkeypatch.delenv("DWARF_ASM_LISTING", raising=False)
        monkeypatch.setenv("DWARF_ASM_RESET_VECTOR", "nowhere")
        options = AssemblerOptions.from_env()
        assert options.listing is False
        assert options.reset_vector == 0


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestErrors:
    """Test abort-on-first-error behavior."""

    def test_failed_run_leaves_no_output(self):
        """A failing run discards the results of an earlier one."""
        asm = Assembler()
        asm.assemble("nop\n")
        with pytest.raises(UnknownMnemonicError):
            asm.assemble("nop\nhalt\n")
        assert asm.get_output() == ""
        assert asm.get_words() == []

    def test_error_message_has_caret(self):
        """Errors quote the line and point at the column."""
        with pytest.raises(UnknownMnemonicError) as exc_info:
            Assembler().assemble("  halt r1\n", "prog.s")
        lines = str(exc_info.value).splitlines()
        assert lines[0] == "prog.s:1:3: error: unknown mnemonic 'halt'"
        assert lines[1] == "      halt r1"
        assert lines[2] == "      ^"


# =============================================================================
# File I/O Tests
# =============================================================================

class TestFiles:
    """Test file-based assembly and output files."""

    def test_assemble_file(self, tmp_path):
        """Sources can be read from disk."""
        source = tmp_path / "prog.s"
        source.write_text("addi r0, 5\n")
        assert assemble_file(source) == "0000:7005\n"

    def test_filename_in_errors(self, tmp_path):
        """Errors name the source file."""
        source = tmp_path / "bad.s"
        source.write_text("halt\n")
        with pytest.raises(UnknownMnemonicError, match="bad.s:1:1"):
            Assembler().assemble_file(source)

    def test_missing_file(self, tmp_path):
        """Unreadable sources raise SourceFileError."""
        missing = tmp_path / "missing.s"
        with pytest.raises(SourceFileError) as exc_info:
            Assembler().assemble_file(missing)
        assert exc_info.value.path == str(missing)
        assert "missing.s" in str(exc_info.value)

    def test_write_output(self, tmp_path):
        """The output stream can be written to a file."""
        asm = Assembler()
        asm.assemble("nop\nbrr r0\n")
        out = tmp_path / "prog.hex"
        asm.write_output(out)
        assert out.read_text() == "0000:0000\n0002:0900\n"

    def test_write_symbols(self, tmp_path):
        """Symbols are written in definition order with their kind."""
        asm = Assembler()
        asm.assemble("loop: nop\n.count 3\n")
        out = tmp_path / "prog.sym"
        asm.write_symbols(out)
        assert out.read_text().splitlines() == [
            "; Symbol table",
            "; Generated by dwasm",
            "loop = $0000 ; label",
            "count = $0003 ; constant",
        ]
