import os
from jinja2 import Environment, FileSystemLoader, StrictUndefined

PROMPT_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "templates")

env = Environment(
    loader=FileSystemLoader(PROMPT_DIR),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def render_prompt(template_name: str, **kwargs) -> str:
    template = env.get_template(template_name)
    return template.render(**kwargs)
