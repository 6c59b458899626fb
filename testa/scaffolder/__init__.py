"""testa project scaffolder.

Creates new test projects and adds test tooling to existing Node.js projects.

Usage::

    from testa.config import ProjectSettings
    from testa.scaffolder import ProjectMaterializer

    settings = ProjectSettings(project_name="shop-tests")
    root = await ProjectMaterializer(settings).create(".")
"""

from testa.scaffolder.generator import ProjectMaterializer, merge_scripts, npm_test_scripts, skeleton_dirs
from testa.scaffolder.installer import DependencyInstaller, install_plan
from testa.scaffolder.substitution import copy_template, rewrite_files, substitute_placeholders
from testa.scaffolder.templates import TemplateRenderer

__all__ = [
    "ProjectMaterializer",
    "merge_scripts",
    "npm_test_scripts",
    "skeleton_dirs",
    "DependencyInstaller",
    "install_plan",
    "rewrite_files",
    "copy_template",
    "substitute_placeholders",
    "TemplateRenderer",
]
