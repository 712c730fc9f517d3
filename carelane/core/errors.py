"""
exceptions that mean "the caller did something the data does not allow".

most scheduling problems (conflicts, clinic hours, authorization overage) are NOT
exceptions here. they are expected, user-correctable states and come back as
ValidationIssue / blocked items.

what is left in this file:
- UnknownServiceCodeError: a session points at a code the catalog does not have.
  that is a data-integrity bug, so it fails loudly.
- UnknownEntityError: an id lookup missed (routes turn it into a 404).
- InvalidSelectionError: a composer selection the catalog rules out (routes turn it into a 422).
"""


class UnknownServiceCodeError(LookupError):
    def __init__(self, code: str):
        super().__init__(f"Service code '{code}' is not in the catalog.")
        self.code = code


class UnknownEntityError(KeyError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"Unknown {kind} '{entity_id}'.")
        self.kind = kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        return self.args[0]


class InvalidSelectionError(ValueError):
    pass
