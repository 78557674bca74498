from typing import (Callable,
                    Union)

Echo = Callable[[str], None]
NodeId = int
RingId = int
Time = Union[float, int]
