import pytest

from basic_porter import CompatibilityAnalyzer, PortingPipeline, load_keyword_tables, load_rules
from basic_porter.options import DialectOptions
from basic_porter.porting import PortingLog


@pytest.fixture(scope="session")
def tables():
    return load_keyword_tables()


@pytest.fixture(scope="session")
def rules():
    return load_rules()


@pytest.fixture(scope="session")
def pipeline(tables):
    return PortingPipeline(tables)


@pytest.fixture(scope="session")
def analyzer(rules, tables):
    return CompatibilityAnalyzer(rules, tables)


@pytest.fixture
def log():
    return PortingLog()


@pytest.fixture
def plain_options():
    """Options that add nothing, so a test sees only the rewrite under test."""
    return DialectOptions(
        add_modern_features=False,
        convert_graphics=False,
        optimize_performance=False,
    )


@pytest.fixture
def run_pass(tables, log, plain_options):
    """Run one pass class over source text; returns the output lines."""
    def _run(pass_class, source, options=None):
        return pass_class(tables).transform(source.split("\n"), log, options or plain_options)
    return _run
