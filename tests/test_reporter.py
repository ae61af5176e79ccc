from basic_porter.reporter import ReportGenerator


def test_text_report_without_issues():
    report = ReportGenerator.generate_text_report([], "game.bas")
    assert "No QB64-PE compatibility issues found in game.bas" in report


def test_text_report_groups_by_severity(analyzer):
    issues = analyzer.analyze("$NOPREFIX\nDIM len AS INTEGER\nGOTO 10")
    report = ReportGenerator.generate_text_report(issues, "game.bas")
    assert "QB64-PE Compatibility Report: game.bas" in report
    assert report.index("ERRORS (1):") < report.index("WARNINGS (1):") < report.index("INFO (1):")
    assert "Summary: 1 errors, 1 warnings, 1 info" in report


def test_summary_counts_categories(analyzer):
    issues = analyzer.analyze("TRON\nTROFF\nx = PEEK(0)")
    assert ReportGenerator.generate_summary(issues) == {"legacy-keyword": 2, "memory-access": 1}


def test_keyboard_report(analyzer):
    clean = analyzer.check_keyboard_safety("PRINT 1")
    assert "No keyboard buffer issues found" in ReportGenerator.generate_keyboard_report(clean)

    result = analyzer.check_keyboard_safety("DO\n    IF _KEYDOWN(27) THEN EXIT DO\nLOOP")
    report = ReportGenerator.generate_keyboard_report(result)
    assert "Keyboard Buffer Safety Report (risk: HIGH)" in report
    assert "HIGH RISK (1):" in report
    assert "1 _KEYDOWN poll(s)" in report


def test_porting_report(pipeline, plain_options):
    result = pipeline.port("GOSUB Nowhere\nEND", plain_options)
    report = ReportGenerator.generate_porting_report(result)
    assert result.summary in report
    assert "[exit-statements] Converted 1 END statement(s) to System 0" in report
    assert "WARNINGS (1):" in report
