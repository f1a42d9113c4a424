"""Request composition for the gNMI Get RPC."""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum

from ..path import Path, to_path
from ..protobuf_util import gnmi_ext_pb2, gnmi_pb2
from .capabilities import Encoding


class DataType(IntEnum):
    """Kind of data requested, valued by the ``GetRequest.DataType`` wire codes."""

    ALL = 0
    CONFIG = 1
    STATE = 2
    OPERATIONAL = 3


def _is_empty(path: str | Path) -> bool:
    if isinstance(path, Path):
        return not (path.elements or path.target or path.origin)
    return not path


def build_get_request(
    prefix: str | Path,
    path: str | Path,
    data_type: DataType = DataType.ALL,
    encoding: Encoding = Encoding.JSON,
    use_models: Iterable[gnmi_pb2.ModelData] = (),
    extensions: Iterable[gnmi_ext_pb2.Extension] = (),
) -> gnmi_pb2.GetRequest:
    """Compose a ``GetRequest`` for a single path.

    Args:
        prefix: Common prefix, left unset when empty
        path: The path to retrieve
        data_type: Config, state, operational or all data
        encoding: Encoding the device should answer with
        use_models: Models the device should restrict itself to
        extensions: gNMI extensions, appended verbatim

    Returns:
        The request message
    """
    request = gnmi_pb2.GetRequest(
        type=int(data_type),
        encoding=int(encoding),
    )
    if not _is_empty(prefix):
        request.prefix.CopyFrom(to_path(prefix))
    request.path.append(to_path(path))
    request.use_models.extend(use_models)
    request.extension.extend(extensions)
    return request
