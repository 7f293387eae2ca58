"""Base class for matrices that are stored in a compressed, structured form."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Tuple

import torch
from torch import Tensor


class StructuredMatrix(ABC):
    """Base class for matrices whose entries are held in a few compact tensors.

    The minimum amount of work to add a new structured matrix class requires
    implementing the following methods:

    - `to_dense`
    - `from_dense`
    - `shape`

    Note:
        You need to register tensors that represent parts of the represented
        matrix using the `register_tensor` method. This is similar to the
        mechanism in PyTorch modules, which have a `register_parameter` method.
        It allows to support copying and device/type conversion out of the box.
    """

    def __init__(self) -> None:
        """Initialize the structured matrix."""
        self._tensor_names: List[str] = []

    def register_tensor(self, tensor: Tensor, name: str) -> None:
        """Register a tensor that represents a part of the matrix structure.

        Args:
            tensor: A tensor that represents a part of the matrix structure.
            name: A name for the tensor. The tensor will be available under
                `self.name`.

        Raises:
            ValueError: If the name is already in use.
        """
        if hasattr(self, name):
            raise ValueError(f"Variable name {name!r} is already in use.")

        setattr(self, name, tensor)
        self._tensor_names.append(name)

    def named_tensors(self) -> Iterator[Tuple[str, Tensor]]:
        """Yield all tensors that represent the matrix and their names.

        Yields:
            A tuple of the tensor's name and the tensor itself.
        """
        for name in self._tensor_names:
            yield name, getattr(self, name)

    @property
    @abstractmethod
    def shape(self) -> Tuple[int, int]:
        """Return the number of rows and columns of the represented matrix.

        Raises:
            NotImplementedError: Must be implemented by a child class.
        """
        raise NotImplementedError

    @classmethod
    @abstractmethod
    def from_dense(cls, mat: Tensor) -> StructuredMatrix:
        """Extract the represented structure from a dense matrix.

        This will discard information that is not part of the structure.

        Args:
            mat: A dense matrix which will be converted into a structured one.

        Returns:
            Structured matrix.

        Raises:
            NotImplementedError: Must be implemented by a child class.
        """
        raise NotImplementedError

    @abstractmethod
    def to_dense(self) -> Tensor:
        """Return a dense tensor representing the structured matrix.

        Returns:
            A dense PyTorch tensor representing the matrix.

        Raises:
            NotImplementedError: Must be implemented by a child class.
        """
        raise NotImplementedError

    @property
    def dtype(self) -> torch.dtype:
        """Return the data type of the represented matrix.

        Returns:
            The data type of the first registered tensor.
        """
        _, tensor = next(self.named_tensors())
        return tensor.dtype

    @property
    def device(self) -> torch.device:
        """Return the device on which the represented matrix lives.

        Returns:
            The device of the first registered tensor.
        """
        _, tensor = next(self.named_tensors())
        return tensor.device

    def clone(self) -> StructuredMatrix:
        """Create a copy that owns its own tensors.

        Returns:
            A structured matrix that does not share memory with `self`.
        """
        return self._replace_tensors(
            {name: tensor.clone() for name, tensor in self.named_tensors()}
        )

    def to(self, *args: Any, **kwargs: Any) -> StructuredMatrix:
        """Convert all tensors with `torch.Tensor.to`.

        Args:
            *args: Positional arguments forwarded to `torch.Tensor.to`.
            **kwargs: Keyword arguments forwarded to `torch.Tensor.to`.

        Returns:
            A structured matrix whose tensors have been converted.
        """
        return self._replace_tensors(
            {
                name: tensor.to(*args, **kwargs)
                for name, tensor in self.named_tensors()
            }
        )

    def __copy__(self) -> StructuredMatrix:
        """Shallow copies still own their tensors (`copy.copy`).

        Returns:
            A deep copy of the matrix.
        """
        return self.clone()

    def __deepcopy__(self, memo: dict) -> StructuredMatrix:
        """Deep copy (`copy.deepcopy`).

        Args:
            memo: Memo dictionary of `copy.deepcopy`.

        Returns:
            A deep copy of the matrix.
        """
        new = self.clone()
        memo[id(self)] = new
        return new

    def _replace_tensors(self, tensors: dict) -> StructuredMatrix:
        """Create a new matrix with the same attributes but different tensors.

        Args:
            tensors: Mapping from registered names to the new tensors.

        Returns:
            The new structured matrix.
        """
        new = self.__class__.__new__(self.__class__)
        new.__dict__.update(self.__dict__)
        new._tensor_names = list(self._tensor_names)
        new.__dict__.update(tensors)
        return new
