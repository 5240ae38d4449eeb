"""Example: Hurricane tracks from best-track observations.

Groups six-hourly storm observations by name and year, joins them into
track lines, cuts the tracks into segments and reprojects the result.
"""

from tracksmith.config import configure_logging
from tracksmith.primitives.crs import describe_crs, estimate_utm_crs
from tracksmith.tasks import TrackTask
from tracksmith.workflows import load_csv_from_string

OBSERVATIONS = """name,year,month,day,hour,lat,long,status,wind,pressure
Amy,1975,6,27,0,27.5,-79.0,tropical depression,25,1013
Amy,1975,6,27,6,28.5,-79.0,tropical depression,25,1013
Amy,1975,6,27,12,29.5,-79.0,tropical depression,25,1013
Amy,1975,6,27,18,30.5,-79.0,tropical depression,25,1013
Amy,1975,6,28,0,31.5,-78.8,tropical depression,25,1012
Amy,1975,6,28,6,32.4,-78.7,tropical depression,25,1012
Amy,1975,6,28,12,33.3,-78.0,tropical depression,25,1011
Amy,1975,6,28,18,34.0,-77.0,tropical depression,30,1006
Amy,1975,6,29,0,34.4,-75.8,tropical storm,35,1004
Amy,1975,6,29,6,34.0,-74.8,tropical storm,40,1002
Caroline,1975,8,24,12,22.4,-69.8,tropical depression,25,1011
Caroline,1975,8,24,18,22.2,-70.5,tropical depression,25,1011
Caroline,1975,8,25,0,22.0,-71.2,tropical depression,25,1011
Caroline,1975,8,30,18,24.3,-95.0,hurricane,100,963
Caroline,1975,8,31,0,24.6,-96.2,hurricane,100,963
Doris,1975,8,29,0,34.9,-46.3,tropical storm,45,1008
"""


def main():
    """Run storm track example."""
    configure_logging("WARNING")

    print("=" * 60)
    print("Storm Track Example")
    print("=" * 60)

    print("\n1. Reading observations...")
    observations = load_csv_from_string(OBSERVATIONS)
    print(f"Read {len(observations)} observations of "
          f"{observations['name'].nunique()} storms")

    print("\n2. Building tracks (one line per storm and year)...")
    task = TrackTask()
    summary = task.summary(observations)
    print(summary[["name", "year", "n_points", "duration_h", "max_category_label"]])
    print("  Doris has a single observation and is dropped")

    print("\n3. Cutting tracks into segments...")
    tracks, segments = task.run(observations)
    fastest = segments.attributes.sort_values("speed_kmh", ascending=False).iloc[0]
    print(f"{len(segments)} segments; fastest: {fastest['name']} at "
          f"{fastest['speed_kmh']:.1f} km/h starting {fastest['time']}")

    print("\n4. Reprojecting to UTM...")
    utm = estimate_utm_crs(-79.0, 30.0)
    description = describe_crs(utm)
    print(f"Target CRS: {description.name} ({description.units})")
    projected, _ = task.run(observations, target_crs=utm)
    print(f"First vertex in UTM: {projected.vertices[0][0].round(1)}")

    print("\n" + "=" * 60)
    print("Summary:")
    for _, row in summary.iterrows():
        print(f"  {row['name']} {row['year']}: {row['length'] / 1000:.0f} km, "
              f"{row['mean_speed_kmh']:.1f} km/h mean speed")
    print("=" * 60)


if __name__ == "__main__":
    main()
