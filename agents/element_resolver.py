# agents/element_resolver.py
"""
Element Resolver
Maps a suggestion's loose target reference onto one of the request's elements.

Strategies, first hit wins:
1. Exact id (only when the reference contains the node-id separator)
2. Quoted name, e.g. 'TEXT "Button"'
3. Element name or type tag appearing anywhere in the reference
4. Round-robin by the suggestion's output position
"""
import logging
import re
from typing import Any, Optional, Sequence

from schemas.suggestions import Element

logger = logging.getLogger(__name__)

# Design-tool node ids look like "123:456"
ID_SEPARATOR = ":"
QUOTED_NAME_PATTERN = re.compile(r'"([^"]+)"')


def resolve_target(
    raw_target: Any,
    elements: Sequence[Element],
    index: int,
) -> Optional[Element]:
    """
    Resolve ``raw_target`` to an element; None only when ``elements`` is empty.
    Pure function of its arguments.
    """
    reference = "" if raw_target is None else str(raw_target)

    if reference:
        if ID_SEPARATOR in reference:
            for element in elements:
                if element.id == reference:
                    logger.debug("Matched by id: %s", reference)
                    return element

        name_match = QUOTED_NAME_PATTERN.search(reference)
        if name_match:
            extracted = name_match.group(1)
            for element in elements:
                if element.name == extracted:
                    logger.debug("Matched by quoted name: %s -> %s", extracted, element.id)
                    return element

        for element in elements:
            if (element.name and element.name in reference) or (
                element.type and element.type in reference
            ):
                logger.debug("Matched by partial reference: %s -> %s", reference, element.id)
                return element

    if not elements:
        return None

    target = elements[index % len(elements)]
    logger.info(
        "No match for %r - round-robin assignment to element %d (%s)",
        reference, index % len(elements), target.id,
    )
    return target
