"""
Basic usage example for the jail activity publisher.
"""

import os
import sys
from pathlib import Path

# Add the parent directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from arrestpub import Config, build_document, render_document
from arrestpub.fixtures import SAMPLE_DATE, get_scenario, mock_advertisement
from arrestpub.render import to_html


def main():
    """
    Basic usage example.
    """
    # Create output directory if it doesn't exist
    os.makedirs("./output", exist_ok=True)

    cfg = Config()
    cfg.render.show_bond_amounts = True

    records = get_scenario("mixedReleases")
    print(f"Rendering {len(records)} sample records for {SAMPLE_DATE}...")

    document = build_document(records, SAMPLE_DATE, cfg, mock_advertisement())
    print(f"Blocks: {', '.join(document.kinds())}")

    with open("./output/basic_usage.html", "w", encoding="utf-8") as f:
        f.write(to_html(document, cfg))
    print("Wrote HTML to ./output/basic_usage.html")

    tree = render_document(records, SAMPLE_DATE, cfg, output_format="lexical")
    print(f"Lexical document has {len(tree['root']['children'])} top-level nodes")

    for i, record in enumerate(records):
        print(f"\nRecord {i+1}:")
        print(f"  Name: {record['full_name']}")
        print(f"  Booked: {record['booking_date']} {record['booking_time']}")
        print(f"  Released: {record['release_date'] or 'Still in custody'}")
        print(f"  Charges ({len(record['charges'])}):")

        for j, charge in enumerate(record['charges']):
            print(f"    {j+1}. {charge['description']} (bond {charge['bond_amount']})")


if __name__ == "__main__":
    main()
