"""
Unit tests for transformation constructors.
"""

import dataclasses

import pytest

from imbo_client import InvalidArgumentError, RawTransformation, Transformation
from imbo_client import transformations as t


class TestTransformation:
    """Test the transformation records."""

    def test_canonical_without_params(self):
        assert Transformation('strip').canonical == 'strip'

    def test_canonical_with_params(self):
        transformation = Transformation('border', (('color', 'fff'), ('width', '2')))
        assert transformation.canonical == 'border:color=fff,width=2'
        assert str(transformation) == 'border:color=fff,width=2'

    def test_is_immutable(self):
        transformation = t.strip()
        with pytest.raises(dataclasses.FrozenInstanceError):
            transformation.name = 'desaturate'

    def test_empty_name(self):
        with pytest.raises(InvalidArgumentError):
            Transformation('')

    def test_raw(self):
        raw = t.raw('custom:foo=bar')
        assert isinstance(raw, RawTransformation)
        assert raw.canonical == 'custom:foo=bar'
        assert raw.name == 'custom'

    def test_raw_invalid(self):
        with pytest.raises(InvalidArgumentError):
            t.raw('')

        with pytest.raises(InvalidArgumentError):
            t.raw(None)


class TestConstructors:
    """Test parameter order, defaults and coercion of each transformation."""

    @pytest.mark.parametrize('factory, expected', [
        (t.auto_rotate, 'autoRotate'),
        (t.desaturate, 'desaturate'),
        (t.flip_horizontally, 'flipHorizontally'),
        (t.flip_vertically, 'flipVertically'),
        (t.progressive, 'progressive'),
        (t.strip, 'strip'),
        (t.transpose, 'transpose'),
        (t.transverse, 'transverse'),
    ])
    def test_without_params(self, factory, expected):
        assert factory().canonical == expected

    def test_border(self):
        assert t.border('c00c00', 13, 37).canonical == 'border:color=c00c00,width=13,height=37'

    def test_border_defaults(self):
        assert t.border().canonical == 'border:color=000000,width=1,height=1'
        assert t.border('ffffff').canonical == 'border:color=ffffff,width=1,height=1'
        assert t.border('f00baa', 5).canonical == 'border:color=f00baa,width=5,height=1'

    def test_border_strips_hash(self):
        assert t.border('#c00c00') == t.border('c00c00')

    def test_canvas(self):
        assert t.canvas(120, 130).canonical == 'canvas:width=120,height=130'
        assert t.canvas(120, 120, 'center').canonical == 'canvas:width=120,height=120,mode=center'
        assert t.canvas(150, 160, 'inset', 17, 18, '#c0ff83').canonical == \
            'canvas:width=150,height=160,mode=inset,x=17,y=18,bg=c0ff83'

    def test_compress(self):
        assert t.compress(90).canonical == 'compress:level=90'
        assert t.compress('40').canonical == 'compress:level=40'
        assert t.compress().canonical == 'compress:level=75'

    def test_compress_invalid(self):
        with pytest.raises(InvalidArgumentError):
            t.compress('high')

        with pytest.raises(InvalidArgumentError):
            t.compress(True)

    def test_crop(self):
        assert t.crop(0, 1, 2, 3).canonical == 'crop:width=2,height=3,x=0,y=1'
        assert t.crop(10, 12, 140, 140, 'center-x').canonical == \
            'crop:width=140,height=140,x=10,y=12,mode=center-x'

    def test_size_transformations(self):
        assert t.max_size(320, 240).canonical == 'maxSize:width=320,height=240'
        assert t.max_size(320).canonical == 'maxSize:width=320'
        assert t.max_size(None, 240).canonical == 'maxSize:height=240'
        assert t.resize(320, 240).canonical == 'resize:width=320,height=240'
        assert t.resize(height=240).canonical == 'resize:height=240'

    def test_size_transformations_require_a_dimension(self):
        with pytest.raises(InvalidArgumentError):
            t.max_size()

        with pytest.raises(InvalidArgumentError):
            t.resize(None, None)

    def test_modulate(self):
        assert t.modulate(14, 23, 88).canonical == 'modulate:b=14,s=23,h=88'
        assert t.modulate(320).canonical == 'modulate:b=320'
        assert t.modulate(None, 240).canonical == 'modulate:s=240'
        assert t.modulate(None, None, 777).canonical == 'modulate:h=777'

    def test_rotate(self):
        assert t.rotate(-45, 'f00baa').canonical == 'rotate:angle=-45,bg=f00baa'
        assert t.rotate(30).canonical == 'rotate:angle=30,bg=000000'
        assert t.rotate(13.37).canonical == 'rotate:angle=13.37,bg=000000'
        assert t.rotate(51, '#c00c00').canonical == 'rotate:angle=51,bg=c00c00'

    def test_rotate_numeric_strings(self):
        assert t.rotate('17.8').canonical == 'rotate:angle=17.8,bg=000000'
        assert t.rotate(90.0).canonical == 'rotate:angle=90,bg=000000'

    @pytest.mark.parametrize('angle', ['foo', '', None, True, float('nan'), float('inf'), []])
    def test_rotate_invalid_angle(self, angle):
        with pytest.raises(InvalidArgumentError):
            t.rotate(angle)

    def test_sepia(self):
        assert t.sepia(90).canonical == 'sepia:threshold=90'
        assert t.sepia('40').canonical == 'sepia:threshold=40'
        assert t.sepia().canonical == 'sepia:threshold=80'

    def test_thumbnail(self):
        assert t.thumbnail().canonical == 'thumbnail:width=50,height=50,fit=outbound'
        assert t.thumbnail(150, 100, 'inset').canonical == 'thumbnail:width=150,height=100,fit=inset'

    def test_watermark(self):
        img = '61da9892205a0d5077a353eb3487e8c8'

        assert t.watermark().canonical == 'watermark:position=top-left,x=0,y=0'
        assert t.watermark(img, 33, 44, 'center', 55, 66).canonical == \
            f'watermark:position=center,x=55,y=66,img={img},width=33,height=44'
        assert t.watermark(None, 50).canonical == 'watermark:position=top-left,x=0,y=0,width=50'
        assert t.watermark(None, None, 120).canonical == 'watermark:position=top-left,x=0,y=0,height=120'

    def test_invalid_color(self):
        with pytest.raises(InvalidArgumentError):
            t.border(0xc00c00)

        with pytest.raises(InvalidArgumentError):
            t.rotate(10, '#')
