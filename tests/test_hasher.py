from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from PIL import Image

import tinyphash
from tinyphash import hasher as hasher_module
from tinyphash.errors import AllocationError, InvalidDimensions
from tinyphash.hasher import TinyPHash, hash_bitmap, hash_file, hash_with, new_hasher
from tinyphash.utils.duplicate_check import hamming_distance


def _smooth_bitmap(size, seed=1):
    """Bilinear upscale of a random 8x8 grid: same content at any resolution."""
    rng = np.random.default_rng(seed)
    grid = rng.integers(0, 256, size=(8, 8), dtype=np.uint8)
    image = Image.fromarray(grid).resize((size, size), Image.Resampling.BILINEAR)
    return np.asarray(image, dtype=np.uint8)


@pytest.fixture(scope="module")
def shared_hasher():
    return new_hasher()


@pytest.mark.parametrize("width,height", [(64, 48), (300, 260), (224, 224)])
def test_hash_is_deterministic(shared_hasher, width, height):
    rng = np.random.default_rng(width * height)
    bitmap = rng.integers(0, 256, size=width * height, dtype=np.uint8).tobytes()

    first = hash_with(shared_hasher, bitmap, width, height)
    second = hash_with(shared_hasher, bitmap, width, height)
    assert first == second
    assert hash_bitmap(bitmap, width, height) == first
    assert hamming_distance(first, second) == 0


def test_hash_is_64_bit(shared_hasher):
    bitmap = _smooth_bitmap(100)
    value = hash_with(shared_hasher, bitmap, 100, 100)
    assert 0 <= value < 1 << 64


@pytest.mark.parametrize("width,height", [(1, 1), (17, 40), (64, 64), (224, 224), (300, 301)])
def test_uniform_bitmap_hashes_to_zero(width, height):
    assert hash_bitmap(bytes([128]) * (width * height), width, height) == 0


def test_uniform_bitmap_other_levels():
    for level in (0, 37, 255):
        assert hash_bitmap(bytes([level]) * (256 * 256), 256, 256) == 0


def test_scale_invariance(shared_hasher):
    small = hash_with(shared_hasher, _smooth_bitmap(256), 256, 256)
    large = hash_with(shared_hasher, _smooth_bitmap(512), 512, 512)
    assert hamming_distance(small, large) <= 8


def test_fast_and_slow_paths_are_each_consistent(shared_hasher):
    fast_bitmap = _smooth_bitmap(224)
    slow_bitmap = _smooth_bitmap(64)

    fast = hash_with(shared_hasher, fast_bitmap, 224, 224)
    slow = hash_with(shared_hasher, slow_bitmap, 64, 64)
    assert fast == hash_with(shared_hasher, fast_bitmap, 224, 224)
    assert slow == hash_with(shared_hasher, slow_bitmap, 64, 64)
    assert hamming_distance(fast, slow) <= 20


def test_different_images_differ(shared_hasher):
    a = hash_with(shared_hasher, _smooth_bitmap(128, seed=1), 128, 128)
    b = hash_with(shared_hasher, _smooth_bitmap(128, seed=2), 128, 128)
    assert a != b


def test_accepts_two_dimensional_array(shared_hasher):
    bitmap = _smooth_bitmap(96)
    assert hash_with(shared_hasher, bitmap, 96, 96) == hash_with(shared_hasher, bitmap.tobytes(), 96, 96)


def test_invalid_dimensions_raise():
    with pytest.raises(InvalidDimensions):
        hash_bitmap(b"", 0, 0)
    with pytest.raises(InvalidDimensions):
        hash_bitmap(bytes(10), 4, 4)


def test_memory_error_becomes_allocation_error(monkeypatch):
    def exhausted(bitmap, width, height):
        raise MemoryError

    monkeypatch.setattr(hasher_module, "resample", exhausted)
    with pytest.raises(AllocationError):
        hash_bitmap(bytes(16), 4, 4)


def test_basis_is_read_only():
    hasher = TinyPHash()
    assert not hasher.basis.flags.writeable
    assert not hasher.basis_transpose.flags.writeable
    with pytest.raises(ValueError):
        hasher.basis[0, 0] = 1.0
    np.testing.assert_array_equal(hasher.basis.T, hasher.basis_transpose)


def test_shared_hasher_across_threads(shared_hasher):
    bitmaps = [_smooth_bitmap(size, seed=size) for size in (48, 96, 160, 240, 320)]
    expected = [hash_with(shared_hasher, bm, bm.shape[1], bm.shape[0]) for bm in bitmaps]

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda bm: hash_with(shared_hasher, bm, bm.shape[1], bm.shape[0]), bitmaps * 4))
    assert results == expected * 4


def test_hash_file_matches_hash_of_decoded_luma(tmp_path, shared_hasher):
    path = tmp_path / "smooth.png"
    Image.fromarray(_smooth_bitmap(240)).save(path)

    luma, width, height = tinyphash.load_luma(path)
    assert hash_file(str(path), shared_hasher) == hash_with(shared_hasher, luma, width, height)
    assert hash_file(str(path)) == hash_file(str(path), shared_hasher)


def test_hash_file_accepts_path_objects(tmp_path, shared_hasher):
    path = tmp_path / "smooth.png"
    Image.fromarray(_smooth_bitmap(64)).save(path)
    assert hash_file(path, shared_hasher) == hash_file(str(path), shared_hasher)
