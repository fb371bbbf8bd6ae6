from __future__ import annotations

class LensEffectError(Exception):
    pass

class CaptureFailure(LensEffectError):
    pass

class PassFailure(LensEffectError):
    def __init__(self, pass_name: str, lens_id: str | None, cause: BaseException | None = None):
        self.pass_name = pass_name
        self.lens_id = lens_id
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Pass '{pass_name}' failed for lens '{lens_id}'{detail}")

class LayoutError(LensEffectError):
    pass
