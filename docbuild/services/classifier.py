from enum import Enum

import filetype


class ClassifiedKind(Enum):
    PDF = "pdf"
    JPEG = "jpg"
    PNG = "png"
    UNSUPPORTED = "unsupported"

    @property
    def is_image(self) -> bool:
        return self in (ClassifiedKind.JPEG, ClassifiedKind.PNG)


_BY_EXTENSION = {kind.value: kind for kind in ClassifiedKind if kind is not ClassifiedKind.UNSUPPORTED}


def classify(data: bytes) -> ClassifiedKind:
    """Kind of ``data`` judged from its magic number only; names are never consulted."""
    if not data:
        return ClassifiedKind.UNSUPPORTED
    kind = filetype.guess(data)
    if kind is None:
        return ClassifiedKind.UNSUPPORTED
    return _BY_EXTENSION.get(kind.extension, ClassifiedKind.UNSUPPORTED)
