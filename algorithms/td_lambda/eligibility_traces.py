"""
Eligibility Traces for TD(lambda).

The trace is the lambda-discounted sum of the prediction gradients seen so
far in a walk (Sutton 1988, p. 15). With linear predictions over basis
vectors the gradient at state s is basis(s), giving the accumulating
trace

    e_t = x_t + lambda * e_{t-1},    e_0 = 0

The trace is reset at the start of every walk; it never carries across
walks.
"""

import torch
from torch import Tensor

from random_walk.states import NUM_STATES


class EligibilityTrace:
    """Accumulating eligibility trace over one walk.

    Attributes:
        lambda_: Trace decay parameter (0=TD(0), 1=Widrow-Hoff)
        trace: Current trace, shape (NUM_STATES,)
    """

    def __init__(self, lambda_: float):
        """Initialize a zero trace.

        Args:
            lambda_: Trace decay parameter
        """
        self.lambda_ = lambda_
        self.trace = torch.zeros(NUM_STATES, dtype=torch.float64)

    def reset(self) -> None:
        """Reset the trace to zero (called at walk start)."""
        self.trace = torch.zeros(NUM_STATES, dtype=torch.float64)

    def update(self, gradient: Tensor) -> Tensor:
        """Decay the trace and add the current gradient.

        Args:
            gradient: (NUM_STATES,) gradient of the current prediction

        Returns:
            The updated trace
        """
        self.trace = gradient + self.lambda_ * self.trace
        return self.trace

    def accumulate(self, gradients: Tensor) -> Tensor:
        """Run the trace over all steps of one walk.

        Args:
            gradients: (T, NUM_STATES) gradient at each step

        Returns:
            (T, NUM_STATES) trace after each step
        """
        self.reset()
        if gradients.shape[0] == 0:
            return torch.zeros(0, NUM_STATES, dtype=torch.float64)
        return torch.stack([self.update(gradient) for gradient in gradients])
