from __future__ import annotations

import pytest

from gltf_primitives.accessor_reader import AccessorReader, accessor_layout
from gltf_primitives.errors import SchemaViolation


@pytest.mark.parametrize(
    ("component_type", "type_name", "values"),
    [
        (5120, "VEC2", [(-128, 127), (0, -1)]),
        (5121, "SCALAR", [0, 255, 17]),
        (5122, "VEC3", [(-32768, 32767, 5), (1, 2, 3)]),
        (5123, "SCALAR", [0, 65535, 42]),
        (5125, "SCALAR", [0, 4294967295, 7]),
        (5126, "VEC3", [(0.1, -2.5, 1e-7), (3.4028234663852886e38, -0.0, 1.0 / 3.0)]),
        (5126, "VEC4", [(0.1, 0.2, 0.3, 0.4)]),
        (5126, "MAT2", [(1.5, 0.25, -0.125, 9.0)]),
    ],
)
def test_write_of_read_is_a_no_op(builder, buffers_snapshot, component_type, type_name, values):
    accessor_id = builder.accessor(values, type_name, component_type)
    before = buffers_snapshot(builder.document)

    reader = AccessorReader(builder.document, accessor_id)
    while not reader.past_end():
        reader.write(reader.read())
        reader.next()

    assert buffers_snapshot(builder.document) == before


def test_read_honours_byte_stride(builder):
    positions = [(1.0, 2.0, 3.0), (4.0, 5.0, 6.0), (7.0, 8.0, 9.0)]
    normals = [(0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (1.0, 0.0, 0.0)]
    position_id, normal_id = builder.interleaved(positions, normals)

    position_reader = AccessorReader(builder.document, position_id)
    normal_reader = AccessorReader(builder.document, normal_id)
    position_reader.seek(2)
    normal_reader.seek(1)

    assert position_reader.read() == [7.0, 8.0, 9.0]
    assert normal_reader.read() == [0.0, 1.0, 0.0]


def test_write_into_strided_view_leaves_neighbours_alone(builder):
    position_id, normal_id = builder.interleaved([(1.0, 1.0, 1.0)] * 2, [(0.0, 0.0, 1.0)] * 2)

    reader = AccessorReader(builder.document, position_id)
    reader.seek(1)
    reader.write([5.0, 6.0, 7.0])

    normals = AccessorReader(builder.document, normal_id)
    normals.seek(1)
    assert normals.read() == [0.0, 0.0, 1.0]
    reader.seek(0)
    assert reader.read() == [1.0, 1.0, 1.0]


def test_next_and_past_end(builder):
    reader = AccessorReader(builder.document, builder.accessor([1, 2], "SCALAR", 5123))
    assert reader.count == 2
    assert not reader.past_end()
    reader.next()
    reader.next()
    assert reader.past_end()
    reader.next()
    assert reader.index == 2


def test_write_with_wrong_value_count(builder, buffers_snapshot):
    reader = AccessorReader(builder.document, builder.accessor([(1.0, 2.0, 3.0)]))
    before = buffers_snapshot(builder.document)
    with pytest.raises(SchemaViolation):
        reader.write([1.0, 2.0])
    assert buffers_snapshot(builder.document) == before


def test_read_past_end_raises(builder):
    reader = AccessorReader(builder.document, builder.accessor([(1.0, 2.0, 3.0)]))
    reader.seek(1)
    with pytest.raises(SchemaViolation):
        reader.read()
    with pytest.raises(SchemaViolation):
        reader.seek(-1)


def test_write_out_of_range_for_component_type(builder):
    reader = AccessorReader(builder.document, builder.accessor([0], "SCALAR", 5121))
    with pytest.raises(SchemaViolation):
        reader.write([256])


def test_accessor_outside_buffer_view(builder):
    accessor_id = builder.accessor([(1.0, 2.0, 3.0), (4.0, 5.0, 6.0)])
    builder.document.accessors[accessor_id]["count"] = 3
    with pytest.raises(SchemaViolation, match="outside bufferView"):
        AccessorReader(builder.document, accessor_id)


def test_buffer_view_outside_buffer(builder):
    accessor_id = builder.accessor([(1.0, 2.0, 3.0)])
    builder.document.buffer_views[0]["byteOffset"] = 4
    with pytest.raises(SchemaViolation, match="outside buffer"):
        AccessorReader(builder.document, accessor_id)


def test_stride_smaller_than_element(builder):
    accessor_id = builder.accessor([(1.0, 2.0, 3.0)])
    builder.document.buffer_views[0]["byteStride"] = 8
    with pytest.raises(SchemaViolation, match="byteStride"):
        accessor_layout(builder.document, accessor_id)


def test_last_strided_element_needs_only_its_own_size(builder):
    position_id, normal_id = builder.interleaved([(1.0, 2.0, 3.0)] * 2, [(0.0, 0.0, 1.0)] * 2)
    builder.document.buffer_views[0]["byteLength"] = 24 + 12
    assert AccessorReader(builder.document, position_id).count == 2
    with pytest.raises(SchemaViolation):
        AccessorReader(builder.document, normal_id)


def test_unknown_accessor_id(builder):
    with pytest.raises(SchemaViolation, match="out of range"):
        AccessorReader(builder.document, 3)


def test_sparse_accessor_rejected(builder):
    accessor_id = builder.accessor([(1.0, 2.0, 3.0)])
    builder.document.accessors[accessor_id]["sparse"] = {"count": 0}
    with pytest.raises(SchemaViolation, match="sparse"):
        AccessorReader(builder.document, accessor_id)
