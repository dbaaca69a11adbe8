import pytest

from zipradius.domain.errors import EmptySeedSetError
from zipradius.domain.models import BoundingBox, GeoPoint, Seed
from zipradius.layout.bounds import bounds_for, zoom_for_bounds

NYC = Seed(label="10001", location=GeoPoint(lat=40.7505, lon=-73.9934))
LA = Seed(label="90210", location=GeoPoint(lat=34.0901, lon=-118.4065))


def test_single_seed_box_is_radius_plus_padding():
    box = bounds_for([NYC], 69, 0.1)

    # 69 mi is one degree each way; span 2 degrees, padded 0.2 per side.
    assert box.south == pytest.approx(40.7505 - 1.2)
    assert box.north == pytest.approx(40.7505 + 1.2)
    assert box.west == pytest.approx(-73.9934 - 1.2)
    assert box.east == pytest.approx(-73.9934 + 1.2)
    assert box.center.lat == pytest.approx(40.7505)


def test_box_contains_every_seed_circle():
    radius = 10
    box = bounds_for([NYC, LA], radius, 0.1)
    deg = radius / 69
    for seed in (NYC, LA):
        assert box.south <= seed.location.lat - deg
        assert box.north >= seed.location.lat + deg
        assert box.west <= seed.location.lon - deg
        assert box.east >= seed.location.lon + deg


def test_zero_padding_and_zero_radius():
    box = bounds_for([NYC], 0, 0)
    assert box == BoundingBox(south=40.7505, west=-73.9934, north=40.7505, east=-73.9934)


def test_latitude_is_clamped_near_poles():
    polar = Seed(label="p", location=GeoPoint(lat=89.9, lon=0))
    box = bounds_for([polar], 100, 0.1)
    assert box.north == 90
    assert box.south < 89.9


def test_invalid_bounds_inputs():
    with pytest.raises(EmptySeedSetError):
        bounds_for([], 10)
    with pytest.raises(ValueError):
        bounds_for([NYC], -1)
    with pytest.raises(ValueError):
        bounds_for([NYC], 10, -0.1)


def test_zoom_for_city_scale_circle():
    zoom = zoom_for_bounds(bounds_for([NYC], 10, 0.1), 1024, 768)
    assert zoom == pytest.approx(11.2, abs=0.05)
    assert zoom == round(zoom, 2)


def test_bigger_boxes_zoom_out():
    city = zoom_for_bounds(bounds_for([NYC], 10))
    country = zoom_for_bounds(bounds_for([NYC, LA], 10))
    assert country < city
    assert 0 <= country < 6


def test_zero_area_box_uses_max_zoom():
    assert zoom_for_bounds(bounds_for([NYC], 0, 0), max_zoom=18) == 18


def test_zoom_requires_positive_viewport():
    with pytest.raises(ValueError):
        zoom_for_bounds(bounds_for([NYC], 10), 0, 768)
