from typing import Optional

import attrs


@attrs.define
class CategoryEntity:
    name: str
    icon: str = 'ticket'
    event_count: int = 0
    id: Optional[int] = None
