"""
Per-model site configuration: selector map, navigation script and
spec-weight table.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


StepAction = Literal["goto", "click", "wait_for", "pause", "evaluate", "assert"]


class NavigationStep(BaseModel):
    """One step of the script that reaches the filtered listing page."""

    action: StepAction
    selector: Optional[str] = None
    url: Optional[str] = None
    script: Optional[str] = None
    arg: Any = None
    ms: int = Field(default=0, ge=0)
    timeout_ms: int = Field(default=10_000, gt=0)
    retries: int = Field(default=0, ge=0)
    retry_delay_ms: int = Field(default=2_000, ge=0)
    optional: bool = False
    message: Optional[str] = None

    @model_validator(mode="after")
    def check_target(self) -> "NavigationStep":
        if self.action in ("click", "wait_for") and not self.selector:
            raise ValueError(f"{self.action} step requires a selector")
        if self.action == "goto" and not self.url:
            raise ValueError("goto step requires a url")
        if self.action in ("evaluate", "assert") and not self.script:
            raise ValueError(f"{self.action} step requires a script")
        return self

    def describe(self) -> str:
        target = self.selector or self.url or (f"{self.ms}ms" if self.action == "pause" else "script")
        return f"{self.action} {target}"


class SiteSelectors(BaseModel):
    listing_container: str
    listing_link: str
    listing_registration: str
    expected_count: str
    next_page: str
    cookie_reject: str

    def discovery_arg(self) -> Dict[str, str]:
        return {
            "container": self.listing_container,
            "link": self.listing_link,
            "registration": self.listing_registration,
        }


class SiteConfig(BaseModel):
    model: str
    base_url: str
    selectors: Optional[SiteSelectors] = None
    expected_count_pattern: str = r"(\d{2,4})\s*available"
    page_size: int = Field(default=23, gt=0)
    navigation: List[NavigationStep] = Field(default_factory=list)
    spec_weights: Dict[str, float] = Field(default_factory=dict)

    @field_validator("spec_weights")
    @classmethod
    def positive_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        bad = [k for k, w in v.items() if w <= 0]
        if bad:
            raise ValueError(f"spec weights must be positive: {bad}")
        return v
