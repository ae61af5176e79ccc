"""Pydantic request/response models."""

from deps import BaseModel, Dict, Field, List, Optional


# --- Requests ---

class PortOptionsIn(BaseModel):
    """Porting options; every field has the pipeline's default."""
    source_dialect: str = Field(default="qbasic", description="qbasic, gwbasic, quickbasic, vb-dos, ...")
    add_modern_features: bool = True
    preserve_comments: bool = True
    convert_graphics: bool = True
    optimize_performance: bool = True

    model_config = {"extra": "forbid"}


class PortRequest(BaseModel):
    """Request body for POST /port."""
    code: str = Field(..., description="Legacy BASIC source to port")
    options: PortOptionsIn = Field(default_factory=PortOptionsIn)


class CheckRequest(BaseModel):
    """Request body for POST /check and POST /keyboard-safety."""
    code: str = Field(..., description="BASIC source to analyze")


# --- Responses ---

class TransformationOut(BaseModel):
    pass_name: str
    description: str


class PortResponse(BaseModel):
    """Response for POST /port."""
    original_code: str
    ported_code: str
    transformations: List[TransformationOut] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    compatibility_level: str = Field(..., description="high, medium or low")
    summary: str


class ExamplesOut(BaseModel):
    incorrect: str
    correct: str


class IssueOut(BaseModel):
    """Single compatibility issue."""
    line: int
    column: int
    pattern: str
    message: str
    severity: str = Field(..., description="error, warning or info")
    category: str
    suggestion: str
    examples: Optional[ExamplesOut] = None
    alternatives: List[str] = Field(default_factory=list)


class CheckResponse(BaseModel):
    """Response for POST /check."""
    issues: List[IssueOut] = Field(default_factory=list)
    summary: Dict[str, int] = Field(default_factory=dict, description="Issue count per category")


class KeyboardIssueOut(BaseModel):
    line: int
    column: int
    pattern: str
    message: str
    suggestion: str
    category: str
    risk_level: str


class KeyboardSafetyResponse(BaseModel):
    """Response for POST /keyboard-safety."""
    has_issues: bool
    risk_level: Optional[str] = None
    issues: List[KeyboardIssueOut] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    best_practices: List[str] = Field(default_factory=list)
    summary: Dict[str, int] = Field(default_factory=dict)


class DialectOut(BaseModel):
    name: str
    display_name: str
    keyword_casing: str
    line_numbers: bool
    spaced_fn_calls: bool
    sigilless_string_functions: bool
    rules: List[str] = Field(default_factory=list)


class KeywordOut(BaseModel):
    """Keyword lookup result."""
    word: str
    is_keyword: bool
    is_reserved: bool
    category: Optional[str] = None
    canonical: Optional[str] = None
    alternatives: List[str] = Field(default_factory=list)
