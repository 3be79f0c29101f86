"""CLI entry point - registers all subcommands."""

import typer

app = typer.Typer(
    name="php-insight",
    help="PHP Insight - Static quality analysis for PHP and Laravel codebases",
    add_completion=False,
    rich_markup_mode="rich",
)


def main() -> None:
    app()


# Import subcommands to register them
from .callback import root as _root_callback  # noqa: F401, E402
from .quality import code_quality as _code_quality  # noqa: F401, E402
from .complexity import reduce_complexity as _reduce_complexity  # noqa: F401, E402
from .testing import testing_analyze as _testing_analyze  # noqa: F401, E402
from .docs import (  # noqa: F401, E402
    docs_architecture as _docs_architecture,
    docs_enhance_code as _docs_enhance_code,
    docs_generate_api as _docs_generate_api,
    docs_user_guide as _docs_user_guide,
)
