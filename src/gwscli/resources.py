from dataclasses import asdict, fields, is_dataclass
from typing import List, Self


class GoogleWorkSpaceResourceBase():
    """
    Mixin for the dataclasses that mirror Work Space request and response
    bodies.  Not a dataclass itself, subclasses are.
    The field names are the camelCase API names so asdict() is already
    most of the way to a request body.
    """
    def to_base(self) -> dict:
        """
        The dict form the GWS client wants.  Nested resources are converted
        through their own to_base() so subclasses can override the shape.
        Call fixup() first to ensure all fields are in correct format.
        """
        self.fixup()
        b = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if isinstance(v, GoogleWorkSpaceResourceBase):
                v = v.to_base()
            elif isinstance(v, list):
                v = [x.to_base() if isinstance(x, GoogleWorkSpaceResourceBase) else x for x in v]
            elif is_dataclass(v):
                v = asdict(v)
            b[f.name] = v
        return b

    def trim(self) -> dict:
        """
        to_base() without the top level attributes that are None or empty.
        Zero and False are real values and stay.  Nested resources are trimmed too.
        """
        b = self.to_base()
        for k, v in list(b.items()):
            if isinstance(v, dict):
                v = _trim_dict(v)
                b[k] = v
            if v is None or (type(v) not in [int, bool, float] and not v):
                del b[k]
        return b

    def fixup(self) -> None:
        """
        notify a subclass to do any field adjustments
        """
        pass

    def update_fields(self, **kwargs) -> List[str]:
        """
        Update the fields that are present, ignoring keys we don't model.
        Returns the names that changed.
        """
        updated_fields = []
        if is_dataclass(self):
            names = {f.name for f in fields(self)}
            for k, v in kwargs.items():
                if v is not None and k in names:
                    setattr(self, k, v)
                    updated_fields.append(k)
            self.fixup()
        return updated_fields

    @classmethod
    def from_response(cls, response: dict|None) -> Self:
        """
        Build from an API response, the APIs return far more than we model
        so unknown keys are dropped rather than blowing up the initializer.
        """
        r = cls()
        if response:
            r.update_fields(**response)
        return r


def _trim_dict(d: dict) -> dict:
    out = {}
    for k, v in d.items():
        if isinstance(v, dict):
            v = _trim_dict(v)
        if v is None or (type(v) not in [int, bool, float] and not v):
            continue
        out[k] = v
    return out
