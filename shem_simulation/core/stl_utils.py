"""
STL file reading and writing for sample and plate meshes.
"""

from __future__ import annotations

import os
from typing import List, Optional, Union

import numpy as np

from .data_classes import TriangulatedSurface
from .geometry import prepare_surface

# Binary STL record: normal, three vertices, attribute byte count
_STL_RECORD = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])
_HEADER_SIZE = 84


def _read_binary(file_path: str, triangle_count: int) -> Optional[np.ndarray]:
    records = np.fromfile(file_path, dtype=_STL_RECORD, count=triangle_count, offset=_HEADER_SIZE)
    if len(records) != triangle_count or triangle_count == 0:
        return None
    facets = np.empty((triangle_count, 4, 3), dtype=float)
    facets[:, 0, :] = records["normal"]
    facets[:, 1:, :] = records["vertices"]
    return facets


def _read_ascii(file_path: str) -> Optional[np.ndarray]:
    facets: List[np.ndarray] = []
    normal = np.zeros(3)
    corners: List[List[float]] = []
    with open(file_path, "r", encoding="utf-8", errors="ignore") as handle:
        for line in handle:
            tokens = line.split()
            if not tokens:
                continue
            keyword = tokens[0].lower()
            if keyword == "facet" and len(tokens) >= 5:
                normal = np.array([float(value) for value in tokens[2:5]])
                corners = []
            elif keyword == "vertex" and len(tokens) >= 4:
                corners.append([float(value) for value in tokens[1:4]])
            elif keyword == "endfacet":
                if len(corners) >= 3:
                    facets.append(np.vstack([normal, np.array(corners[:3])]))
                normal = np.zeros(3)
                corners = []
    if not facets:
        return None
    return np.stack(facets, axis=0)


def load_stl_mesh(file_path: str) -> np.ndarray:
    """Load the facets of an ASCII or binary STL file.

    A file whose size matches the triangle count in its binary header is read
    as binary, anything else as ASCII.

    Parameters
    ----------
    file_path : str
        Path to the STL file on disk.

    Returns
    -------
    np.ndarray, shape (n_facets, 4, 3)
        Each facet is [normal, v0, v1, v2]. Normals are as stored in the
        file and may be zero.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"STL file '{file_path}' does not exist")

    file_size = os.path.getsize(file_path)
    with open(file_path, "rb") as handle:
        header = handle.read(_HEADER_SIZE)

    facets = None
    if len(header) == _HEADER_SIZE:
        triangle_count = int.from_bytes(header[80:84], byteorder="little", signed=False)
        if _HEADER_SIZE + triangle_count * _STL_RECORD.itemsize == file_size:
            facets = _read_binary(file_path, triangle_count)
    if facets is None:
        facets = _read_ascii(file_path)

    if facets is None:
        raise ValueError(f"No facets were found in '{file_path}' - the file may be corrupt")
    return facets


def save_stl_mesh(facets: np.ndarray, file_path: str, binary: bool = True, name: str = "shem") -> None:
    """Write facets of shape (n, 4, 3) or (n, 3, 3) to an STL file."""
    facets = np.asarray(facets, dtype=float)
    if facets.ndim != 3 or facets.shape[1] not in (3, 4) or facets.shape[2] != 3:
        raise ValueError(f"Expected facets of shape (n, 3, 3) or (n, 4, 3), got {facets.shape}")
    if facets.shape[1] == 3:
        normals = np.cross(facets[:, 1] - facets[:, 0], facets[:, 2] - facets[:, 0])
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        normals = normals / np.where(lengths > 0, lengths, 1.0)
        facets = np.concatenate([normals[:, np.newaxis, :], facets], axis=1)

    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if binary:
        records = np.zeros(len(facets), dtype=_STL_RECORD)
        records["normal"] = facets[:, 0, :]
        records["vertices"] = facets[:, 1:, :]
        header = name.encode("ascii", errors="ignore")[:80].ljust(80, b" ")
        with open(file_path, "wb") as handle:
            handle.write(header)
            handle.write(np.uint32(len(facets)).tobytes())
            handle.write(records.tobytes())
        return

    with open(file_path, "w", encoding="utf-8") as handle:
        handle.write(f"solid {name}\n")
        for facet in facets:
            handle.write("  facet normal {:e} {:e} {:e}\n".format(*facet[0]))
            handle.write("    outer loop\n")
            for corner in facet[1:]:
                handle.write("      vertex {:e} {:e} {:e}\n".format(*corner))
            handle.write("    endloop\n  endfacet\n")
        handle.write(f"endsolid {name}\n")


def load_stl_surface(
    file_path: str,
    surface_index: int = 0,
    composition: Union[int, np.ndarray] = 1,
    parameter: Union[float, np.ndarray] = 0.0,
    scale: float = 1.0,
    name: Optional[str] = None,
) -> TriangulatedSurface:
    """Load an STL file as a scene-ready surface.

    ``scale`` multiplies every vertex (e.g. 1e3 for a file in metres when the
    simulation works in millimetres). Normals are renormalised, and recomputed
    from the winding order where the file stores zeros.
    """
    if scale <= 0.0:
        raise ValueError(f"Scale must be positive, got {scale}")
    facets = load_stl_mesh(file_path)
    facets[:, 1:, :] *= scale
    if name is None:
        name = os.path.splitext(os.path.basename(file_path))[0]
    surface = prepare_surface(facets, surface_index, composition, parameter, name)
    print(f"[info] Loaded {surface.n_faces} facets from {file_path}")
    return surface
