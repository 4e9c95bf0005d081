# Lazy imports so that `from ng2react.core.templates import ...` does not
# build the tree-sitter language or load the policy YAML.

__all__ = [
    "Ng2ReactError",
    "ProjectInfo",
    "PolicyRegistry",
    "load_policy",
    "transform_component_file",
    "transform_template_to_tsx",
    "ProjectMigrator",
    "MigrationResult",
]

_IMPORT_MAP = {
    "Ng2ReactError": ".errors",
    "ProjectInfo": ".components",
    "PolicyRegistry": ".policy",
    "load_policy": ".policy",
    "transform_component_file": ".transform",
    "transform_template_to_tsx": ".templates",
    "ProjectMigrator": ".project",
    "MigrationResult": ".project",
}


def __getattr__(name):
    if name in _IMPORT_MAP:
        import importlib
        module = importlib.import_module(_IMPORT_MAP[name], __package__)
        return getattr(module, name)
    raise AttributeError(f"module 'ng2react.core' has no attribute {name}")
