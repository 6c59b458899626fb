"""testa configuration.

The configuration bag collected by ``create`` / ``init`` is a frozen Pydantic
v2 model so it can be validated once at construction time and then passed,
unchanged, through the materializer, the substitution engine and the
environment-file writer.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Framework(str, Enum):
    """Supported test frameworks."""
    PLAYWRIGHT = "playwright"
    CYPRESS = "cypress"
    SELENIUM = "selenium"


class ProjectType(str, Enum):
    """Kind of test project to scaffold."""
    E2E = "e2e"
    API = "api"
    FULL = "full"


class Feature(str, Enum):
    """Optional feature areas selectable when scaffolding."""
    AUTH = "auth"
    API = "api"
    UI = "ui"
    WEBSOCKET = "websocket"
    PERFORMANCE = "performance"
    VISUAL = "visual"


FEATURE_LABELS: dict[Feature, str] = {
    Feature.AUTH: "Authentication Tests",
    Feature.API: "API Tests",
    Feature.UI: "UI Tests",
    Feature.WEBSOCKET: "WebSocket Tests",
    Feature.PERFORMANCE: "Performance Tests",
    Feature.VISUAL: "Visual Regression Tests",
}

DEFAULT_FEATURES: frozenset[Feature] = frozenset({Feature.AUTH, Feature.API, Feature.UI})

# Features that add an extra ``src/<name>`` directory to the skeleton.
OPTIONAL_DIR_FEATURES: tuple[Feature, ...] = (
    Feature.WEBSOCKET,
    Feature.PERFORMANCE,
    Feature.VISUAL,
)

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_ADMIN_EMAIL = "admin@example.com"
DEFAULT_ADMIN_PASSWORD = "admin_password"
DEFAULT_USER_EMAIL = "user@example.com"
DEFAULT_USER_PASSWORD = "user_password"

_FRAMEWORKS_DIR = Path(__file__).parent / "scaffolder" / "frameworks"


# ---------------------------------------------------------------------------
# Configuration bag
# ---------------------------------------------------------------------------

class ProjectSettings(BaseModel):
    """Immutable settings for one scaffolding invocation.

    Instances are created once by the CLI (from prompts, or from the
    environment when running non-interactively) and then passed to every
    component that needs them.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Project name (directory and package name)")
    base_url: str = Field(default=DEFAULT_BASE_URL)
    api_url: str = Field(default=DEFAULT_API_URL)
    use_typescript: bool = Field(default=True)
    admin_email: str = Field(default="")
    admin_password: str = Field(default="")
    user_email: str = Field(default="")
    user_password: str = Field(default="")
    features: frozenset[Feature] = Field(default=DEFAULT_FEATURES)
    framework: Framework = Field(default=Framework.PLAYWRIGHT)
    project_type: ProjectType = Field(default=ProjectType.FULL)

    @property
    def source_ext(self) -> str:
        """File extension used for synthesized source files."""
        return "ts" if self.use_typescript else "js"

    def has_feature(self, feature: Feature) -> bool:
        return feature in self.features

    @classmethod
    def from_env(
        cls,
        project_name: str,
        framework: Framework = Framework.PLAYWRIGHT,
        project_type: ProjectType = ProjectType.FULL,
    ) -> "ProjectSettings":
        """Build settings without prompting.

        Recognised variables (all optional):
            TESTA_BASE_URL, TESTA_API_URL, TESTA_TYPESCRIPT,
            TESTA_ADMIN_EMAIL, TESTA_ADMIN_PASSWORD,
            TESTA_USER_EMAIL, TESTA_USER_PASSWORD, TESTA_FEATURES.
        """
        features_str = os.environ.get("TESTA_FEATURES")
        if features_str:
            features = frozenset(
                Feature(f.strip()) for f in features_str.split(",") if f.strip()
            )
        else:
            features = DEFAULT_FEATURES

        use_ts = os.environ.get("TESTA_TYPESCRIPT", "true").strip().lower() not in (
            "0", "false", "no", "off",
        )

        return cls(
            project_name=project_name,
            base_url=os.environ.get("TESTA_BASE_URL", DEFAULT_BASE_URL),
            api_url=os.environ.get("TESTA_API_URL", DEFAULT_API_URL),
            use_typescript=use_ts,
            admin_email=os.environ.get("TESTA_ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL),
            admin_password=os.environ.get("TESTA_ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD),
            user_email=os.environ.get("TESTA_USER_EMAIL", DEFAULT_USER_EMAIL),
            user_password=os.environ.get("TESTA_USER_PASSWORD", DEFAULT_USER_PASSWORD),
            features=features,
            framework=framework,
            project_type=project_type,
        )


def framework_template_dir(framework: Framework | str) -> Path:
    """Return the directory holding the copyable template for *framework*.

    ``TESTA_TEMPLATE_DIR`` overrides the packaged template root.  The
    returned directory may not exist; callers fall back to synthesizing
    default files in that case.
    """
    name = framework.value if isinstance(framework, Framework) else str(framework)
    root = os.environ.get("TESTA_TEMPLATE_DIR")
    base = Path(root) if root else _FRAMEWORKS_DIR
    return base / name
