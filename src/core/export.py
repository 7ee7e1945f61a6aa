"""CSV export utilities."""
import csv

from django.http import HttpResponse


def rows_to_csv_response(headers, rows, filename):
    """Write *headers* then every row of *rows* into a CSV ``HttpResponse``.

    Args:
        headers: list of column labels.
        rows: iterable of sequences; ``None`` cells are written as "".
        filename: download filename (without extension)
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
    # UTF-8 BOM for Excel compatibility
    response.write("\ufeff")

    writer = csv.writer(response)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])

    return response
