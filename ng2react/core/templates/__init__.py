"""Template compiler: markup -> intermediate tree -> TSX.

Public API:
    transform_template_to_tsx(template, template_url, component_info) → str
    parse_template(template, template_url, component_info) → ContainerIntermediate
    generate_code(intermediate, component_info) → str
"""

from .generator import generate_code
from .parser import parse_template, transform_template_to_tsx

__all__ = ["generate_code", "parse_template", "transform_template_to_tsx"]
