import ast
from pathlib import Path


def _imports(py_file: Path):
    tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom):
            yield node.lineno, node.module or ""


def _violations(layer: str, forbidden: tuple):
    repo_root = Path(__file__).resolve().parents[2]
    layer_dir = repo_root / "comwatch" / layer

    violations = []
    for py_file in layer_dir.rglob("*.py"):
        rel_path = py_file.relative_to(repo_root)
        for lineno, name in _imports(py_file):
            if any(name == f or name.startswith(f + ".") for f in forbidden):
                violations.append(f"{rel_path}:{lineno} imports {name}")
    return violations


def test_infrastructure_layer_does_not_import_pipeline():
    """Infrastructure adapters must not depend on the pipeline or CLI."""
    violations = _violations("infrastructure", ("comwatch.pipeline", "comwatch.main"))
    assert not violations, "Infrastructure must not import pipeline:\n" + "\n".join(violations)


def test_domain_layer_is_self_contained():
    """Domain models and events only depend on each other."""
    violations = _violations("domain", ("comwatch.pipeline", "comwatch.infrastructure", "comwatch.main"))
    assert not violations, "Domain must not import outer layers:\n" + "\n".join(violations)


def test_pipeline_layer_does_not_import_cli():
    violations = _violations("pipeline", ("comwatch.main",))
    assert not violations, "Pipeline must not import the CLI:\n" + "\n".join(violations)
