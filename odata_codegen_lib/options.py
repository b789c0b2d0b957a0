"""
Generation options controlled from the command line.
"""

from pydantic import BaseModel


class GeneratorOptions(BaseModel):
    serde: bool = True                  # pydantic models with aliases and validators
    empty_string_is_null: bool = True   # coerce "" to None for Optional[str] fields
    reflection: bool = True             # OpenDataModel descriptors
    expand: bool = True                 # navigation fields and relation descriptors

    @classmethod
    def from_flags(cls, no_serde: bool = False, no_empty_string_is_null: bool = False,
                   no_reflection: bool = False, no_expand: bool = False) -> 'GeneratorOptions':
        return cls(
            serde=not no_serde,
            empty_string_is_null=not no_empty_string_is_null,
            reflection=not no_reflection,
            expand=not no_expand
        )
