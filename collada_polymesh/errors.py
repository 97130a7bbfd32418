"""
Exception types raised while importing geometry.

Two families matter to callers:

- UnsupportedInputError: the input contains something we can't convert
  (a spline, a line primitive, inconsistent index streams). The offending
  geometry or primitive is skipped and the import continues.
- InternalConsistencyError / UnsupportedEncodingError: the current mesh
  can't be converted safely. The mesh is aborted before anything is
  written for it; other meshes are unaffected.
"""


class ColladaImportError(Exception):
    """Base class for every import failure."""


class UnsupportedInputError(ColladaImportError, ValueError):
    """Input the importer deliberately doesn't handle."""


class UnsupportedGeometryError(UnsupportedInputError):
    """Geometry type other than a plain mesh (convex mesh, spline)."""


class UnsupportedPrimitiveError(UnsupportedInputError):
    """Primitive shape without a face decoder (lines, points, ...)."""

    def __init__(self, message: str, primitive_index: int = -1):
        super().__init__(message)
        self.primitive_index = primitive_index


class MalformedPrimitiveError(UnsupportedPrimitiveError):
    """Primitive whose index streams don't match its vertex counts."""


class InternalConsistencyError(ColladaImportError, AssertionError):
    """Decoder bug: edge lookup miss or attribute cursor mismatch."""


class UnsupportedEncodingError(ColladaImportError, TypeError):
    """Value stream that is neither single nor double precision float."""
