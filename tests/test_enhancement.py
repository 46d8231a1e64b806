"""Tests for adaptive enhancement parameters and their application."""
import math

import pytest
from PIL import Image

import thumbnail_composer.enhancement as tc_enhancement
from thumbnail_composer.analysis.features import ChannelStats, ColorAnalysis
from thumbnail_composer.constants import CONTRAST_CAP, SATURATION_CAP

B = 1.2


def _analysis(  # noqa: PLR0913
    mean: float = 0.5,
    contrast: float = 0.4,
    saturation: float = 0.3,
    *,
    color_cast: bool = False,
    channel_means: tuple[float, float, float] = (0.5, 0.5, 0.5),
) -> ColorAnalysis:
    return ColorAnalysis(
        mean_brightness=mean,
        max_brightness=1.0,
        min_brightness=0.0,
        contrast=contrast,
        color_cast=color_cast,
        saturation_level=saturation,
        is_underexposed=mean < 0.3,
        is_overexposed=mean > 0.7,
        dynamic_range=1.0,
        channel_means=channel_means,
    )


class TestIntensity:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [("none", 0.0), ("light", 0.7), ("medium", 1.0), ("high", 1.3),
         ("bogus", 1.0)],
    )
    def test_multipliers(self, level: str, expected: float) -> None:
        assert tc_enhancement.intensity_multiplier(level) == expected


class TestEnhancementParams:
    def test_underexposed_branch(self) -> None:
        params = tc_enhancement.calculate_enhancement_params(
            _analysis(mean=0.2), "medium",
        )
        assert params.brightness == pytest.approx(1 + 0.2 * B)
        assert params.gamma == pytest.approx(0.8)
        assert params.contrast.offset == pytest.approx(0.02)
        assert params.normalise.upper == pytest.approx(0.97)

    def test_overexposed_branch(self) -> None:
        params = tc_enhancement.calculate_enhancement_params(
            _analysis(mean=0.8), "high",
        )
        assert params.brightness == pytest.approx(1 - 0.13)
        assert params.gamma == pytest.approx(1.1 + 0.13)
        assert params.normalise.upper == pytest.approx(0.98)
        assert params.contrast.offset == pytest.approx(-0.026)

    def test_normal_branch(self) -> None:
        params = tc_enhancement.calculate_enhancement_params(
            _analysis(mean=0.5), "light",
        )
        assert params.brightness == pytest.approx(1 + 0.05 * 0.7)
        assert params.gamma == pytest.approx(1.1 + 0.07)
        assert params.contrast.offset == 0.0

    @pytest.mark.parametrize(
        ("saturation", "factor"),
        [(0.1, 0.5), (0.2, 0.5), (0.3, 0.2)],
    )
    def test_saturation(self, saturation: float, factor: float) -> None:
        params = tc_enhancement.calculate_enhancement_params(
            _analysis(saturation=saturation), "medium",
        )
        assert params.saturation == pytest.approx(1 + factor * B)

    def test_low_contrast_multiply(self) -> None:
        low = tc_enhancement.calculate_enhancement_params(
            _analysis(contrast=0.2), "medium",
        )
        normal = tc_enhancement.calculate_enhancement_params(
            _analysis(contrast=0.4), "medium",
        )
        assert low.contrast.multiply == pytest.approx(1 + 0.25 * B)
        assert normal.contrast.multiply == pytest.approx(1 + 0.15 * B)

    def test_none_level_is_identity_like(self) -> None:
        params = tc_enhancement.calculate_enhancement_params(_analysis(), "none")
        assert params.brightness == 1.0
        assert params.saturation == 1.0
        assert params.contrast.multiply == 1.0
        assert params.sharpen == tc_enhancement.BASE_SHARPEN

    def test_white_balance_only_with_cast(self) -> None:
        cast = _analysis(color_cast=True, channel_means=(0.8, 0.5, 0.2))
        params = tc_enhancement.calculate_enhancement_params(cast, "medium")
        assert params.white_balance == pytest.approx(
            math.degrees(math.atan2(0.2 - 0.5, 0.8 - 0.5)),
        )
        neutral = tc_enhancement.calculate_enhancement_params(_analysis(), "medium")
        assert neutral.white_balance == 0.0

    def test_white_balance_malformed(self) -> None:
        assert tc_enhancement.white_balance_shift([0.5]) == 0.0
        assert tc_enhancement.white_balance_shift([math.nan, 0.1, 0.2]) == 0.0

    def test_pure_function(self) -> None:
        analysis = _analysis(mean=0.35, contrast=0.1, saturation=0.1)
        first = tc_enhancement.calculate_enhancement_params(analysis, "high")
        second = tc_enhancement.calculate_enhancement_params(analysis, "high")
        assert first == second


class TestAdaptiveSharpening:
    def test_low_contrast(self) -> None:
        sharpen = tc_enhancement.calculate_adaptive_sharpening(
            _analysis(contrast=0.1), 1.0,
        )
        assert sharpen.sigma == pytest.approx(0.8 * 1.3)
        assert sharpen.m1 == pytest.approx(0.8)
        assert sharpen.m2 == pytest.approx(1.8)
        assert sharpen.x1 == pytest.approx(2.4)
        assert sharpen.y2 == pytest.approx(8.0)

    def test_dark(self) -> None:
        sharpen = tc_enhancement.calculate_adaptive_sharpening(
            _analysis(mean=0.2, contrast=0.4), 1.0,
        )
        assert sharpen.sigma == pytest.approx(0.64)
        assert sharpen.m1 == pytest.approx(0.7)
        assert sharpen.m2 == pytest.approx(2.0)
        assert sharpen.x1 == pytest.approx(2.6)
        assert sharpen.y2 == pytest.approx(9.0)

    def test_normal(self) -> None:
        sharpen = tc_enhancement.calculate_adaptive_sharpening(_analysis(), 1.0)
        assert sharpen.sigma == pytest.approx(0.96)
        assert sharpen.m1 == pytest.approx(1.1)
        assert sharpen.y2 == pytest.approx(11.0)


class TestThumbnailBoost:
    def test_caps(self) -> None:
        params = tc_enhancement.calculate_enhancement_params(
            _analysis(saturation=0.1, contrast=0.1), "high",
        )
        boosted = tc_enhancement.apply_thumbnail_boost(params)
        assert boosted.saturation == pytest.approx(SATURATION_CAP)
        assert boosted.contrast.multiply == pytest.approx(CONTRAST_CAP)

    def test_boost_below_cap(self) -> None:
        params = tc_enhancement.calculate_enhancement_params(_analysis(), "light")
        boosted = tc_enhancement.apply_thumbnail_boost(params)
        assert boosted.saturation == pytest.approx(params.saturation * 1.2)


class TestEnhanceImage:
    def test_returns_opaque_same_size(self, gradient_image: Image.Image) -> None:
        out = tc_enhancement.enhance_image(gradient_image, "medium")
        assert out.size == gradient_image.size
        assert out.mode == "RGBA"
        assert out.getextrema()[3] == (255, 255)

    def test_malformed_stats_skip_enhancement(
        self,
        mocker,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Unusable statistics leave the image unenhanced."""
        mocker.patch.object(
            tc_enhancement,
            "compute_stats",
            return_value=[ChannelStats(mean=1, min=0, max=2, stdev=1)],
        )
        img = Image.new("RGB", (8, 8), (10, 20, 30))
        out = tc_enhancement.enhance_image(img, "medium")
        assert out.tobytes() == img.tobytes()
        assert "Skipping enhancement" in caplog.text

    @pytest.mark.parametrize("error", [ValueError("bad curve"), OSError("io")])
    def test_adjustment_error_returns_original(
        self,
        mocker,
        caplog: pytest.LogCaptureFixture,
        error: Exception,
    ) -> None:
        """A failing raster step leaves the image unenhanced."""
        mocker.patch.object(tc_enhancement.tc_raster, "sharpen", side_effect=error)
        img = Image.new("RGB", (8, 8), (10, 20, 30))
        out = tc_enhancement.enhance_image(img, "medium")
        assert out.tobytes() == img.tobytes()
        assert "Skipping enhancement" in caplog.text
        assert str(error) in caplog.text
