from basic_porter.porting.gosub import GosubPass


def gosub(run_pass, source):
    return run_pass(GosubPass, source)


def test_subroutine_lifted_and_calls_rewritten(run_pass, log):
    source = """CLS
GOSUB DrawBox
GOSUB DrawBox
END

DrawBox:
    PRINT "box"
RETURN"""
    assert gosub(run_pass, source) == [
        "CLS",
        "Call DrawBox",
        "Call DrawBox",
        "END",
        "",
        "Sub DrawBox",
        '    PRINT "box"',
        "End Sub",
    ]
    assert [t.description for t in log.transformations] == [
        "Converted 1 GOSUB subroutine(s) to SUB procedures: DrawBox",
        "Rewrote 2 GOSUB call(s) as Call statements",
    ]
    assert log.errors == []
    assert any("DIM SHARED" in w for w in log.warnings)


def test_conditional_return_becomes_exit_sub(run_pass):
    source = """GOSUB Check
END
Check:
    IF x > 10 THEN RETURN
    PRINT x
RETURN"""
    assert gosub(run_pass, source) == [
        "Call Check",
        "END",
        "Sub Check",
        "    IF x > 10 THEN Exit Sub",
        "    PRINT x",
        "End Sub",
    ]


def test_return_inside_block_if_becomes_exit_sub(run_pass):
    source = """GOSUB Check
END
Check:
    IF done THEN
        RETURN
    END IF
    PRINT 1
RETURN"""
    lines = gosub(run_pass, source)
    assert lines[4] == "        Exit Sub"
    assert lines[-1] == "End Sub"


def test_statements_before_return_keep_their_line(run_pass):
    source = "GOSUB Show\nEND\nShow:\n    PRINT 1: RETURN ' back"
    assert gosub(run_pass, source) == [
        "Call Show",
        "END",
        "Sub Show",
        "    PRINT 1",
        "End Sub ' back",
    ]


def test_block_running_to_end_of_file(run_pass, log):
    source = 'GOSUB Tail\nEND\nTail:\n    PRINT "tail"\n'
    assert gosub(run_pass, source) == [
        "Call Tail",
        "END",
        "Sub Tail",
        '    PRINT "tail"',
        "End Sub",
        "",
    ]
    assert "GOSUB block Tail (line 3) has no RETURN and runs to the end of the main module" in log.warnings


def test_goto_target_is_not_lifted(run_pass, log):
    source = "GOSUB Again\nAgain:\n    PRINT 1\n    GOTO Again\nRETURN"
    assert gosub(run_pass, source) == source.split("\n")
    assert log.errors == [
        "Label Again is both a GOSUB target and a GOTO/THEN/ELSE jump target; it was not converted"
    ]


def test_overlapping_label_ranges_are_errors(run_pass, log):
    source = "GOSUB First\nEND\nFirst:\n    PRINT 1\nSecond:\n    PRINT 2\nRETURN"
    assert gosub(run_pass, source) == source.split("\n")
    assert len(log.errors) == 1
    assert "runs into label Second (line 5)" in log.errors[0]


def test_duplicate_labels_are_errors(run_pass, log):
    source = "GOSUB Twice\nTwice:\nRETURN\nTwice:\nRETURN"
    assert gosub(run_pass, source) == source.split("\n")
    assert log.errors == ["Label Twice is defined more than once (lines 2, 4)"]


def test_return_to_label_is_an_error(run_pass, log):
    source = "GOSUB Handler\nEND\nHandler:\n    RETURN Done\nDone:\nPRINT 1"
    assert gosub(run_pass, source) == source.split("\n")
    assert "RETURN with a target cannot become a SUB" in log.errors[0]


def test_undefined_and_numeric_targets_warn(run_pass, log):
    source = "GOSUB Nowhere\nGOSUB 100\n100 PRINT 1\nRETURN"
    assert gosub(run_pass, source) == source.split("\n")
    assert "GOSUB Nowhere has no matching label definition" in log.warnings
    assert any(w.startswith("GOSUB 100 targets a line number") for w in log.warnings)
    assert log.transformations == []


def test_on_gosub_targets_stay_labels(run_pass, log):
    source = "ON k GOSUB One, Two\nEND\nOne:\nRETURN\nTwo:\nRETURN"
    assert gosub(run_pass, source) == source.split("\n")
    assert log.warnings == [
        "ON ... GOSUB target One (line 3) was left as a label; ON ... GOSUB has no procedure form",
        "ON ... GOSUB target Two (line 5) was left as a label; ON ... GOSUB has no procedure form",
    ]


def test_label_inside_procedure_is_not_lifted(run_pass, log):
    source = "GOSUB Inner\nEND\nSUB Foo\nInner:\nRETURN\nEND SUB"
    assert gosub(run_pass, source) == source.split("\n")
    assert log.warnings == [
        "Label Inner (line 4) is inside a SUB or FUNCTION; its GOSUB block was not converted"
    ]


def test_source_without_gosub_is_untouched(run_pass, log):
    source = "Start:\nPRINT 1\nGOTO Start"
    assert gosub(run_pass, source) == source.split("\n")
    assert log.transformations == []
    assert log.warnings == []


def test_gosub_without_target_warns(run_pass, log):
    source = 'PRINT "GOSUB"\nGOSUB\nIF x THEN GOSUB: PRINT 1'
    assert gosub(run_pass, source) == source.split("\n")
    assert log.warnings == [
        "Line 2: GOSUB has no label or line number to call; left unchanged",
        "Line 3: GOSUB has no label or line number to call; left unchanged",
    ]
