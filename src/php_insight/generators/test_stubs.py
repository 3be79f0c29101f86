"""PHPUnit test skeletons for untested classes."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from ..exceptions import FileAccessError
from ..logging_config import get_logger
from ..models import CodebaseFacts, Priority, Recommendation, SourceUnit

logger = get_logger(__name__)

TEST_NAMESPACE = "Tests\\Unit"
TEST_DIRECTORY = Path("tests") / "Unit"


def _ucfirst(name: str) -> str:
    return name[:1].upper() + name[1:]


def _lcfirst(name: str) -> str:
    return name[:1].lower() + name[1:]


def render_test_method(method: str) -> str:
    return (
        "    /**\n"
        f"     * Test {method} method\n"
        "     */\n"
        f"    public function test{_ucfirst(method)}(): void\n"
        "    {\n"
        f"        // TODO: Implement test for {method} method\n"
        "        $this->markTestIncomplete('Test not implemented yet');\n"
        "    }\n"
    )


def render_test_class(class_name: str, namespace: str = "", methods: Iterable[str] = ()) -> str:
    """PHP source of a ``{class_name}Test`` PHPUnit case."""
    qualified = f"{namespace}\\{class_name}" if namespace else class_name
    variable = _lcfirst(class_name)
    body = "\n".join(render_test_method(method) for method in methods)
    return (
        "<?php\n"
        "\n"
        f"namespace {TEST_NAMESPACE};\n"
        "\n"
        "use Tests\\TestCase;\n"
        f"use {qualified};\n"
        "use Illuminate\\Foundation\\Testing\\RefreshDatabase;\n"
        "\n"
        f"class {class_name}Test extends TestCase\n"
        "{\n"
        "    use RefreshDatabase;\n"
        "\n"
        f"    protected {class_name} ${variable};\n"
        "\n"
        "    protected function setUp(): void\n"
        "    {\n"
        "        parent::setUp();\n"
        f"        $this->{variable} = new {class_name}();\n"
        "    }\n"
        + (f"\n{body}" if body else "")
        + "}\n"
    )


class TestStubGenerator:
    """Writes test skeletons for high-priority missing tests.

    Existing files are never overwritten, so running the generator twice
    creates nothing the second time.
    """

    __test__ = False

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def target_for(self, class_name: str) -> Path:
        return self.root / TEST_DIRECTORY / f"{class_name}Test.php"

    def generate(
        self, recommendations: Iterable[Recommendation], facts: Optional[CodebaseFacts] = None
    ) -> list[Path]:
        """Create stubs and return the paths written.

        Raises:
            FileAccessError: If a stub cannot be written
        """
        units = {unit.name: unit for unit in facts.classes} if facts else {}
        created = []
        for rec in recommendations:
            if rec.kind != "missing_test" or rec.priority is not Priority.HIGH:
                continue
            target = self.target_for(rec.subject)
            if target.exists():
                logger.debug(f"Skipping {target}: already exists")
                continue
            self._write(target, self._render(rec.subject, units.get(rec.subject)))
            created.append(target)
        return created

    @staticmethod
    def _render(class_name: str, unit: Optional[SourceUnit]) -> str:
        if unit is None:
            return render_test_class(class_name)
        return render_test_class(
            class_name, unit.namespace, [method.name for method in unit.testable_methods]
        )

    @staticmethod
    def _write(target: Path, content: str) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise FileAccessError(target, f"cannot write test stub: {e}")
        logger.info(f"Generated test file: {target}")
