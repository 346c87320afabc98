"""FederationLink value object.

Binds a local user account to the subject identifier an external identity
provider issued for it.
"""

from fedlink.domain.shared.model.value import ValueObject


class FederationLink(ValueObject):
    """A link between a local user and an upstream identity.

    Examples:
    - provider_id="github", federation_uid="583231"
    - provider_id="corp-oidc", federation_uid="f0c1e2d3-..."

    Invariants:
    - `(provider_id, federation_uid)` is globally unique
    - `(user_id, provider_id)` is unique: a user links at most once per provider
    - Links are never updated, only created and deleted
    """

    user_id: str
    provider_id: str
    federation_uid: str
