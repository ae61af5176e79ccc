from basic_porter.options import DialectOptions
from basic_porter.porting.casing import KeywordCasingPass
from basic_porter.porting.declarations import (
    DimSigilPass,
    ForwardDeclarationPass,
    TypeDeclarationPass,
)
from basic_porter.porting.def_fn import DefFnPass
from basic_porter.porting.graphics import GraphicsPass
from basic_porter.porting.metacommands import MetacommandPass
from basic_porter.porting.review import CompatibilityReviewPass
from basic_porter.porting.substitutions import (
    ArraySyntaxPass,
    ExitStatementPass,
    MathConstantPass,
    StringFunctionPass,
    TimingPass,
)


# --- metacommands ---

def test_metacommands_remove_noprefix_and_add_window_setup(run_pass, log):
    source = "' Space Blaster\n$NOPREFIX\nSCREEN 12\nLimit 60"
    lines = run_pass(MetacommandPass, source, DialectOptions())
    assert lines == [
        "' Space Blaster",
        "$Resize:Smooth",
        '_Title "Space Blaster"',
        "",
        "SCREEN 12",
        "_Limit 60",
    ]
    descriptions = [t.description for t in log.transformations]
    assert any("$NOPREFIX" in d for d in descriptions)
    assert "Restored the underscore prefix on 1 QB64 keyword(s)" in descriptions


def test_metacommands_leave_existing_setup_alone(run_pass):
    source = "$Resize:Smooth\n_Title \"Game\"\nSCREEN 12"
    assert run_pass(MetacommandPass, source, DialectOptions()) == source.split("\n")


def test_metacommands_skip_setup_for_text_programs(run_pass):
    source = "SCREEN 0\nLINE INPUT \"Name\"; n$"
    assert run_pass(MetacommandPass, source, DialectOptions()) == source.split("\n")


def test_metacommands_drop_comments_but_keep_metacommand_comments(run_pass, log):
    options = DialectOptions(preserve_comments=False, add_modern_features=False)
    lines = run_pass(MetacommandPass, "' header\n'$DYNAMIC\nCLS ' clear", options)
    assert lines == ["'$DYNAMIC", "CLS ' clear"]
    assert log.transformations[-1].description == "Removed 1 comment line(s)"


# --- forward declarations ---

def test_forward_declarations_removed_but_libraries_kept(run_pass):
    source = "DECLARE SUB Foo ()\nDECLARE FUNCTION Bar% (x)\nDECLARE LIBRARY\nEND DECLARE\nCLS"
    assert run_pass(ForwardDeclarationPass, source) == ["DECLARE LIBRARY", "END DECLARE", "CLS"]


# --- keyword casing ---

def test_casing_skips_strings_and_comments(tables):
    line, count = KeywordCasingPass(tables).convert_line('PRINT "PRINT": x = LEN(a$) \' PRINT')
    assert line == 'Print "PRINT": x = Len(a$) \' PRINT'
    assert count == 2


def test_casing_leaves_member_access_and_sigiled_names(tables):
    casing = KeywordCasingPass(tables)
    assert casing.convert_line("CLS: t.print = 1")[0] == "Cls: t.print = 1"
    assert casing.convert_line("len% = 3") == ("len% = 3", 0)


def test_casing_stops_at_data_items(tables):
    assert KeywordCasingPass(tables).convert_line("DATA PRINT, GOTO")[0] == "Data PRINT, GOTO"


def test_casing_handles_file_print(tables):
    assert KeywordCasingPass(tables).convert_line("PRINT#1, x")[0] == "Print#1, x"


# --- DEF FN ---

def test_def_fn_single_line_becomes_function(run_pass, log):
    lines = run_pass(DefFnPass, "DEF FnDouble(x) = x * 2\nPRINT FnDouble(5)\nEND")
    assert lines == [
        "PRINT FnDouble(5)",
        "END",
        "",
        "Function FnDouble(x)",
        "    FnDouble = x * 2",
        "End Function",
    ]
    assert log.warnings == []


def test_def_fn_multi_line_block(run_pass):
    source = "DEF FnMax(a, b)\n    IF a > b THEN FnMax = a: EXIT DEF\n    FnMax = b\nEND DEF"
    assert run_pass(DefFnPass, source) == [
        "Function FnMax(a, b)",
        "    IF a > b THEN FnMax = a: Exit Function",
        "    FnMax = b",
        "End Function",
    ]


def test_def_fn_warns_about_module_variables(run_pass, log):
    run_pass(DefFnPass, "DEF FnScale(x) = x * factor")
    assert len(log.warnings) == 1
    assert log.warnings[0].startswith("FnScale uses module-level variable(s) factor")


def test_def_fn_joins_spaced_calls(run_pass, log):
    lines = run_pass(DefFnPass, "DEF FN A(X) = X + 1\nPRINT FN A(2)")
    assert lines == ["PRINT FNA(2)", "", "Function FNA(X)", "    FNA = X + 1", "End Function"]
    assert "Joined 1 spaced FN call(s) into function names" in [
        t.description for t in log.transformations
    ]


def test_def_fn_joins_spaced_calls_for_every_dialect(run_pass):
    source = "DEF FN A(X) = X + 1\nPRINT FN A(2)"
    for dialect in ("qbasic", "gwbasic", "vb6"):
        assert run_pass(DefFnPass, source, DialectOptions(source_dialect=dialect))[0] == "PRINT FNA(2)"


def test_def_fn_keeps_following_statements_in_main_module(run_pass, log):
    lines = run_pass(DefFnPass, "DEF FNA(X) = X * 2: PRINT FNA(1)\nEND")
    assert lines == ["PRINT FNA(1)", "END", "", "Function FNA(X)", "    FNA = X * 2", "End Function"]
    assert log.warnings == []


def test_def_fn_keeps_line_number_and_following_statements(run_pass):
    lines = run_pass(DefFnPass, '10 DEF FNA(X) = X * 2: PRINT "A:B"\n20 END')
    assert lines[:2] == ['10 PRINT "A:B"', "20 END"]
    assert lines[3:] == ["Function FNA(X)", "    FNA = X * 2", "End Function"]


def test_def_fn_single_line_keeps_comment(run_pass):
    lines = run_pass(DefFnPass, "DEF FNA(X) = X * 2 ' doubles x\nEND")
    assert lines == ["END", "", "Function FNA(X) ' doubles x", "    FNA = X * 2", "End Function"]


def test_def_fn_multi_line_header_with_statement(run_pass, log):
    source = "DEF FnSq(n): FnSq = n * n\nEND DEF"
    assert run_pass(DefFnPass, source) == ["Function FnSq(n): FnSq = n * n", "End Function"]
    assert log.warnings == []


def test_def_fn_malformed_definition_warns(run_pass, log):
    source = "DEF FNX(\nx = 1: DEF FNY(a) = a"
    assert run_pass(DefFnPass, source) == source.split("\n")
    assert log.warnings == [
        "Line 1: DEF FN definition is malformed, no rewrite attempted: DEF FNX(",
        "Line 2: DEF FN follows another statement on the line; left unchanged: DEF FNY(a) = a",
    ]


def test_def_fn_missing_end_def_is_an_error(run_pass, log):
    run_pass(DefFnPass, "DEF FnX(a)\n    FnX = a")
    assert log.errors == ["DEF FnX has no matching END DEF"]


# --- DIM sigils ---

def test_dim_sigils_removed_when_type_matches(run_pass, log):
    source = "DIM count% AS INTEGER, player$ AS STRING * 20, total# AS SINGLE"
    lines = run_pass(DimSigilPass, source)
    assert lines == ["DIM count AS INTEGER, player AS STRING * 20, total# AS SINGLE"]
    assert len(log.warnings) == 1
    assert log.warnings[0].startswith("Line 1: total# is declared AS SINGLE")


def test_dim_sigils_skip_array_bounds(run_pass):
    lines = run_pass(DimSigilPass, "REDIM PRESERVE scores&(1 TO 10) AS LONG")
    assert lines == ["REDIM PRESERVE scores(1 TO 10) AS LONG"]


def test_dim_sigils_unsigned_types(run_pass):
    assert run_pass(DimSigilPass, "DIM b~%% AS _UNSIGNED _BYTE") == ["DIM b AS _UNSIGNED _BYTE"]


def test_dim_sigils_kept_when_bare_name_is_keyword(run_pass, log):
    source = "DIM name$ AS STRING, len$ AS STRING, timer! AS SINGLE, cls% AS INTEGER, key$ AS STRING"
    assert run_pass(DimSigilPass, source) == [source]
    assert len(log.warnings) == 5
    assert log.warnings[0].startswith("Line 1: name$ would become the keyword NAME")
    assert log.transformations == []


def test_dim_sigils_ignore_other_statements(run_pass):
    assert run_pass(DimSigilPass, "x% = 5") == ["x% = 5"]


# --- TYPE blocks ---

TYPE_SOURCE = """TYPE Player
    name AS STRING * 20: score% AS INTEGER
    lives   AS   INTEGER ' remaining
    tag AS STRING
END TYPE"""


def test_type_fields_split_and_normalized(run_pass, log):
    lines = run_pass(TypeDeclarationPass, TYPE_SOURCE)
    assert lines == [
        "TYPE Player",
        "    name As STRING * 20",
        "    score As INTEGER",
        "    lives As INTEGER ' remaining",
        "    tag As STRING",
        "END TYPE",
    ]
    assert any("field tag: variable-length STRING" in w for w in log.warnings)


def test_type_field_sigil_kept_when_bare_name_is_keyword(run_pass, log):
    lines = run_pass(TypeDeclarationPass, "TYPE Rec\n    key$ AS STRING * 4\nEND TYPE")
    assert lines[1] == "    key$ As STRING * 4"
    assert log.warnings == ["TYPE Rec field key$ would become the keyword KEY without its sigil; sigil kept"]


def test_type_fields_are_stable(run_pass):
    once = run_pass(TypeDeclarationPass, TYPE_SOURCE)
    assert run_pass(TypeDeclarationPass, "\n".join(once)) == once


# --- array syntax ---

def test_put_get_arrays_gain_parentheses(run_pass):
    source = "PUT (10, 20), sprite\nGET (0, 0)-(15, 15), buffer%\nPUT (x, y), tiles(0), PSET\nPUT #1, , record"
    assert run_pass(ArraySyntaxPass, source) == [
        "PUT (10, 20), sprite()",
        "GET (0, 0)-(15, 15), buffer%()",
        "PUT (x, y), tiles(0), PSET",
        "PUT #1, , record",
    ]


# --- string functions ---

def test_string_functions_cased_and_trim_mapped(run_pass):
    lines = run_pass(StringFunctionPass, "a$ = LEFT$(b$, 3) + trim$(c$)")
    assert lines == ["a$ = Left$(b$, 3) + _Trim$(c$)"]


def test_sigilless_dialect_gains_string_sigils(run_pass):
    options = DialectOptions(source_dialect="vb6")
    lines = run_pass(StringFunctionPass, "s = Left(t, 2) & Trim(u)", options)
    assert lines == ["s = Left$(t, 2) & _Trim$(u)"]


def test_sigilless_calls_left_alone_for_qbasic(run_pass):
    assert run_pass(StringFunctionPass, "s = Left(t, 2)") == ["s = Left(t, 2)"]


def test_user_defined_trim_is_not_replaced(run_pass):
    source = "x$ = TRIM$(y$)\nFUNCTION Trim$ (s$)\nEND FUNCTION"
    assert run_pass(StringFunctionPass, source)[0] == "x$ = TRIM$(y$)"


# --- math constants ---

def test_pi_calculations_become_constant(run_pass):
    source = "pi# = 4 * ATN(1)\nPI = ATN(1) * 4 ' circle\nx = 4 * ATN(1) + 1"
    assert run_pass(MathConstantPass, source) == [
        "pi# = _Pi",
        "PI = _Pi ' circle",
        "x = 4 * ATN(1) + 1",
    ]


# --- exit statements ---

def test_bare_end_becomes_system(run_pass):
    source = "END\n100 END ' done\nEND IF\n  END"
    assert run_pass(ExitStatementPass, source) == [
        "System 0",
        "100 System 0 ' done",
        "END IF",
        "  System 0",
    ]


# --- timing ---

def test_rest_becomes_delay_and_timer_difference_warns(run_pass, log):
    lines = run_pass(TimingPass, "Rest 2\nrest = 5\nt# = TIMER - start#")
    assert lines == ["_Delay 2", "rest = 5", "t# = TIMER - start#"]
    assert log.warnings == ["Consider using Timer(.001) for more precise timing in QB64PE"]


def test_busy_wait_loops_warn_when_optimizing(run_pass, log):
    source = "FOR i = 1 TO 5000: NEXT i\nFOR d = 1 TO 10000\nNEXT d\nFOR i = 1 TO 3\n    PRINT i\nNEXT"
    run_pass(TimingPass, source, DialectOptions())
    assert [w.split(":")[0] for w in log.warnings] == ["Line 1", "Line 2"]


def test_busy_wait_loops_silent_without_optimizing(run_pass, log):
    run_pass(TimingPass, "FOR i = 1 TO 5000: NEXT i")
    assert log.warnings == []


# --- graphics ---

def test_graphics_setup_follows_screen(run_pass):
    lines = run_pass(GraphicsPass, "SCREEN 13\nPSET (1, 1), 4", DialectOptions())
    assert lines == ["SCREEN 13", "_FullScreen _SquarePixels , _Smooth", "PSET (1, 1), 4"]


def test_graphics_setup_not_added_twice_or_for_text_mode(run_pass):
    options = DialectOptions()
    assert run_pass(GraphicsPass, "SCREEN 0\nPRINT 1", options) == ["SCREEN 0", "PRINT 1"]
    source = "SCREEN 12\n_FULLSCREEN"
    assert run_pass(GraphicsPass, source, options) == source.split("\n")


# --- review ---

def test_review_warns_without_changing_text(run_pass, log):
    source = (
        "IF a THEN b = 1: IF c THEN d = 2\n"
        "DIM a(10), b(10)\n"
        "FUNCTION Area(w, h) AS SINGLE\n"
        "    Area = w * h\n"
        "END FUNCTION\n"
        "PRINT Area(2, 3)"
    )
    assert run_pass(CompatibilityReviewPass, source) == source.split("\n")
    assert log.warnings[0].startswith("Multi-statement lines detected at line(s) 1 ")
    assert log.warnings[1].startswith("1 multi-array declaration(s) found")
    assert log.warnings[2].startswith("1 function(s) using AS clause")
    assert log.warnings[3].startswith("Line 6: main module code follows a SUB/FUNCTION block")


def test_review_allows_data_and_labels_after_procedures(run_pass, log):
    run_pass(CompatibilityReviewPass, "SUB A\nEND SUB\nDATA 1, 2\nlevel1:")
    assert log.warnings == []
