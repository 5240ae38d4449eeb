"""Example: WKT versus PROJ4 representations of a CRS.

Shows the same coordinate reference system as WKT2, WKT1 and a PROJ4
string, and checks which systems lose information in PROJ4 form.
"""

import numpy as np

from tracksmith.config import configure_logging
from tracksmith.primitives.crs import (
    SpatialReference,
    describe_crs,
    detect_crs_format,
    proj4_is_lossy,
    to_proj4,
    to_wkt,
)


def main():
    """Run CRS example."""
    configure_logging("ERROR")

    print("=" * 60)
    print("CRS Representation Example")
    print("=" * 60)

    print("\n1. Describing British National Grid (EPSG:27700)...")
    description = describe_crs("EPSG:27700")
    print(f"Name: {description.name}")
    print(f"Datum: {description.datum}, ellipsoid: {description.ellipsoid}")
    print(f"Units: {description.units}, axes: {description.axis_order}")

    print("\n2. WKT2 (ISO 19162:2019)...")
    wkt2 = to_wkt("EPSG:27700", pretty=True)
    print("\n".join(wkt2.splitlines()[:6]) + "\n  ...")
    print(f"Detected format: {detect_crs_format(wkt2)}")

    print("\n3. WKT1 (GDAL flavour)...")
    wkt1 = to_wkt("EPSG:27700", version="WKT1_GDAL")
    print(wkt1[:80] + "...")
    print(f"Detected format: {detect_crs_format(wkt1)}")

    print("\n4. PROJ4 string...")
    proj4 = to_proj4("EPSG:27700")
    print(proj4)
    print(f"Detected format: {detect_crs_format(proj4)}")

    print("\n5. Which systems lose information as PROJ4?")
    for code in ("EPSG:4326", "EPSG:3857", "EPSG:27700", "EPSG:32633"):
        lossy = proj4_is_lossy(code)
        print(f"  {code}: {'lossy' if lossy else 'round trips'}")

    print("\n6. Transforming a point (London) to the grid...")
    wgs84 = SpatialReference("EPSG:4326")
    grid = wgs84.transform(np.array([[-0.1276, 51.5072]]), "EPSG:27700")
    print(f"Easting {grid[0, 0]:.0f} m, northing {grid[0, 1]:.0f} m")

    print("\n" + "=" * 60)
    print("Summary:")
    print(f"  WKT2 length: {len(wkt2)} characters")
    print(f"  PROJ4 length: {len(proj4)} characters")
    print("=" * 60)


if __name__ == "__main__":
    main()
