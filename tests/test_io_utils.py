import numpy as np
import pytest
from PIL import Image

from autolevel import Encoding, UnsupportedEncoding, level_stack
from autolevel.io_utils import load_stack, save_stack


class TestStackFiles:
    def test_multipage_gray8_tiff(self, tmp_path):
        path = tmp_path / "stack.tif"
        frames = [
            Image.fromarray(np.array([[10, 20], [30, 40]], dtype=np.uint8)),
            Image.fromarray(np.array([[5, 5], [5, 250]], dtype=np.uint8)),
        ]
        frames[0].save(path, save_all=True, append_images=frames[1:])

        stack = load_stack(path)

        assert stack.encoding is Encoding.GRAY8
        assert stack.slice_count == 2
        assert stack.data.shape == (2, 2, 2)
        assert stack.data[1, 1, 1] == 250

    def test_rgb_png(self, tmp_path):
        path = tmp_path / "color.png"
        Image.fromarray(np.full((3, 4, 3), 90, dtype=np.uint8)).save(path)

        stack = load_stack(path)

        assert stack.encoding is Encoding.RGB
        assert stack.data.shape == (1, 3, 4, 3)

    def test_float_roundtrip_after_leveling(self, tmp_path):
        data = np.array([[[0.2, 0.4], [0.6, 0.8]]], dtype=np.float32)
        path = tmp_path / "float.tif"
        save_stack(path, data, Encoding.GRAY32)

        stack = load_stack(path)
        assert stack.encoding is Encoding.GRAY32
        level_stack(stack.data, stack.encoding)

        np.testing.assert_allclose(
            stack.data[0], [[0.0, 1.0 / 3.0], [2.0 / 3.0, 1.0]], atol=1e-6
        )

    def test_save_multipage(self, tmp_path):
        data = np.stack([np.full((2, 2), v, dtype=np.uint8) for v in (1, 2, 3)])
        path = tmp_path / "out.tif"
        save_stack(path, data, Encoding.GRAY8)

        with Image.open(path) as img:
            assert img.n_frames == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_stack(tmp_path / "nope.tif")

    def test_unsupported_mode(self, tmp_path):
        path = tmp_path / "bits.png"
        Image.new("1", (2, 2)).save(path)
        with pytest.raises(UnsupportedEncoding):
            load_stack(path)
