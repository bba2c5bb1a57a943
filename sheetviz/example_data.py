"""
Example data generator for SheetViz.

Writes one synthetic regional sales table for demonstration.  It has
five regions, four products and twelve months, with a few intentionally
blank cells and one extreme ``Sales`` value so the data quality panel
has something to report.
"""

import csv
import logging
import os
import random

log = logging.getLogger(__name__)

EXAMPLE_FILENAME = 'regional_sales.csv'

EXAMPLE_HEADERS = [
    'Region', 'Product', 'Month', 'Sales', 'Units', 'Discount', 'Rating',
]


def generate_example_csv(output_dir: str) -> str:
    """Generate the example sales table in *output_dir*.

    Returns
    -------
    str
        Path of the written CSV file.
    """
    os.makedirs(output_dir, exist_ok=True)

    # Reproducible randomness
    rng = random.Random(42)

    # ── Table definition ─────────────────────────────────────────────
    regions = {
        'North': 1.00,
        'South': 0.85,
        'East': 1.25,
        'West': 1.10,
        'Central': 0.70,
    }
    products = {
        'Laptop': (1100.0, 4),
        'Monitor': (260.0, 9),
        'Keyboard': (45.0, 30),
        'Headset': (80.0, 18),
    }
    months = [f'2024-{m:02d}-01' for m in range(1, 13)]

    rows = []
    for region, demand in regions.items():
        for product, (price, base_units) in products.items():
            for m_idx, month in enumerate(months):
                # Mild seasonality peaking in Q4
                season = 1.0 + 0.25 * (m_idx >= 9) - 0.1 * (m_idx in (6, 7))
                units = max(1, int(rng.gauss(base_units * demand * season, 2.5)))
                discount = round(rng.choice((0.0, 0.0, 0.05, 0.1, 0.15)), 2)
                sales = round(units * price * (1.0 - discount), 2)
                rating = round(min(5.0, max(1.0, rng.gauss(4.1, 0.5))), 1)
                rows.append([region, product, month, sales, units, discount, rating])

    # ── Deliberate gaps and one outlier ──────────────────────────────
    for _ in range(max(1, len(rows) // 25)):
        row = rng.choice(rows)
        row[rng.choice((4, 5, 6))] = None
    rows[rng.randrange(len(rows))][3] = 250000.0

    # ── Write CSV ────────────────────────────────────────────────────
    filepath = os.path.join(output_dir, EXAMPLE_FILENAME)
    with open(filepath, 'w', encoding='utf-8', newline='') as fh:
        writer = csv.writer(fh)
        writer.writerow(EXAMPLE_HEADERS)
        for row in rows:
            writer.writerow(['' if v is None else v for v in row])

    log.info("Wrote example table (%d rows) to %s", len(rows), filepath)
    return filepath


if __name__ == '__main__':
    import tempfile
    out_dir = os.path.join(tempfile.gettempdir(), 'sheetviz_example')
    path = generate_example_csv(out_dir)
    print(f"  {path} ({os.path.getsize(path):,} bytes)")
