from basic_porter import check_keyboard_safety
from basic_porter.issue import RiskLevel

UNDRAINED_LOOP = """DO
    IF _KEYDOWN(27) THEN EXIT DO
    _LIMIT 30
LOOP"""

DRAINED_LOOP = """DO
    IF _KEYDOWN(27) THEN EXIT DO
    DO WHILE _KEYHIT: LOOP
    _LIMIT 30
LOOP"""


def test_unpaired_escape_poll(analyzer):
    result = analyzer.check_keyboard_safety(UNDRAINED_LOOP)
    assert result.has_issues
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.category == "unpaired-poll"
    assert issue.pattern == "_KEYDOWN(27)"
    assert issue.risk_level == RiskLevel.HIGH
    assert (issue.line, issue.column) == (2, 8)
    assert result.risk_level == RiskLevel.HIGH
    assert result.summary["keydown_usages"] == 1
    assert result.summary["buffer_drains"] == 0
    assert result.summary["high_risk"] == 1


def test_drain_in_same_loop_pairs_the_poll(analyzer):
    result = analyzer.check_keyboard_safety(DRAINED_LOOP)
    assert not result.has_issues
    assert result.risk_level is None
    assert result.summary["buffer_drains"] == 1
    assert result.summary["inkey_usages"] == 0
    assert result.suggestions[0].startswith("Good practice")


def test_drain_in_other_procedure_does_not_pair(analyzer):
    source = """SUB Poll
    IF _KEYDOWN(32) THEN x = 1
END SUB
SUB Drain
    DO WHILE _KEYHIT: LOOP
END SUB"""
    result = analyzer.check_keyboard_safety(source)
    assert [i.category for i in result.issues] == ["unpaired-poll"]


def test_competing_inkey_reads(analyzer):
    source = 'DO\n    k$ = INKEY$\n    IF INKEY$ = "q" THEN END\nLOOP'
    result = analyzer.check_keyboard_safety(source)
    assert [(i.category, i.line) for i in result.issues] == [("competing-handlers", 3)]
    assert result.risk_level == RiskLevel.MEDIUM
    assert result.summary["inkey_usages"] == 2


def test_ctrl_poll_without_drain_before_inkey(analyzer):
    source = "DO\n    IF _KEYDOWN(100306) THEN x = 1\n    k$ = INKEY$\nLOOP"
    result = analyzer.check_keyboard_safety(source)
    categories = [i.category for i in result.issues]
    assert categories == ["unpaired-poll", "modifier-capture"]
    assert result.issues[0].pattern == "_KEYDOWN(CTRL)"
    assert result.summary["ctrl_modifier_checks"] == 1
    assert any(s.startswith("CTRL+key combinations") for s in result.suggestions)
    assert any("no keyboard buffer drains" in s for s in result.suggestions)


def test_control_code_comparison(analyzer):
    result = analyzer.check_keyboard_safety('k$ = INKEY$\nIF k$ = CHR$(3) THEN END')
    assert [(i.category, i.pattern) for i in result.issues] == [("control-code-compare", "CHR$(3)")]
    assert result.risk_level == RiskLevel.LOW


def test_enter_comparison_is_not_flagged(analyzer):
    result = analyzer.check_keyboard_safety('k$ = INKEY$\nIF k$ = CHR$(13) THEN END')
    assert not result.has_issues


def test_exit_after_poll(analyzer):
    source = "SUB Handle\n    IF _KEYDOWN(27) THEN EXIT SUB\nEND SUB"
    result = analyzer.check_keyboard_safety(source)
    assert [i.category for i in result.issues] == ["unpaired-poll", "exit-after-poll"]


def test_keywords_inside_strings_are_ignored():
    result = check_keyboard_safety('PRINT "_KEYDOWN(27) INKEY$"')
    assert not result.has_issues
    assert result.summary["keydown_usages"] == 0
    assert result.summary["inkey_usages"] == 0


def test_result_to_dict(analyzer):
    data = analyzer.check_keyboard_safety(UNDRAINED_LOOP).to_dict()
    assert data["has_issues"] is True
    assert data["risk_level"] == "high"
    assert data["issues"][0]["risk_level"] == "high"
    assert len(data["best_practices"]) == 5
    assert set(data["summary"]) == {
        "total_issues", "high_risk", "medium_risk", "low_risk",
        "keydown_usages", "inkey_usages", "buffer_drains",
        "ctrl_modifier_checks", "alt_modifier_checks", "shift_modifier_checks",
    }
