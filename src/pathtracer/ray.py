import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker


class Ray:
    """A batch of rays ``P(t) = origin + t * direction``.

    Directions are not normalized; a single ray is a batch of one.
    """

    def __init__(self, origin: Float[t.Tensor, "N 3"], direction: Float[t.Tensor, "N 3"]):
        if origin.shape != direction.shape:
            raise ValueError(f"origin {tuple(origin.shape)} and direction {tuple(direction.shape)} shapes differ")
        self.origin = origin
        self.direction = direction

    @staticmethod
    def single(origin: Float[t.Tensor, "3"], direction: Float[t.Tensor, "3"]) -> "Ray":
        return Ray(origin.unsqueeze(0), direction.unsqueeze(0))

    @jaxtyped(typechecker=typechecker)
    def at(self, distance: Float[t.Tensor, "N"]) -> Float[t.Tensor, "N 3"]:
        return self.origin + distance.unsqueeze(-1) * self.direction

    def __len__(self) -> int:
        return self.origin.shape[0]

    def __getitem__(self, index) -> "Ray":
        return Ray(self.origin[index], self.direction[index])

    def __repr__(self) -> str:
        return f"Ray(n={len(self)}, device={self.origin.device})"
