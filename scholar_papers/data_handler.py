# data_handler.py
import json
import logging
from typing import List

import pandas as pd

from scholar_papers.models import PaperRecord


class DataHandler:
    """Renders scraped PaperRecords as text, JSON or CSV."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def format_record(self, record: PaperRecord, indent: int = 0) -> str:
        pad = " " * indent
        lines = [f'{pad}"{record.title}"']
        if record.authors:
            lines.append(f"{pad}  Authors: {', '.join(record.authors)}")
        if record.venue or record.year:
            lines.append(f"{pad}  Published: {', '.join(str(p) for p in (record.venue, record.year) if p)}")
        if record.cluster_id:
            lines.append(f"{pad}  Cluster ID: {record.cluster_id}")
        lines.append(f"{pad}  Cited by: {record.cited_by_count}")
        if record.snippet:
            lines.append(f"{pad}  {record.snippet}")
        if record.citers:
            lines.append(f"{pad}  ... is cited by:")
            for citer in record.citers:
                lines.append(self.format_record(citer, indent + 4))
        return "\n".join(lines)

    def format_text(self, records: List[PaperRecord]) -> str:
        """Formats records as human-readable blocks separated by blank lines."""
        return "\n\n".join(self.format_record(record) for record in records)

    def to_json(self, records: List[PaperRecord]) -> str:
        """Serializes records as a JSON array."""
        return json.dumps([record.to_dict() for record in records], indent=4, ensure_ascii=False)

    def save_to_json(self, records: List[PaperRecord], filename: str):
        """Saves a list of records to a JSON file.

        Args:
            records (List[PaperRecord]): The records to save.
            filename (str): The name of the JSON file to save to.

        """
        if not records:
            self.logger.warning("No results to save to JSON.")
        with open(filename, "w", encoding="utf-8") as jsonfile:
            jsonfile.write(self.to_json(records))
        self.logger.info(f"Successfully saved {len(records)} results to JSON file: {filename}")

    def to_dataframe(self, records: List[PaperRecord]) -> pd.DataFrame:
        """Converts records to a flat pandas DataFrame (authors joined with "; ", citers counted)."""
        columns = ["title", "authors", "snippet", "cluster_id", "cited_by_count", "article_url", "year", "venue"]
        rows = []
        for record in records:
            row = {column: getattr(record, column) for column in columns}
            row["authors"] = "; ".join(record.authors)
            row["citers"] = len(record.citers) if record.citers is not None else None
            rows.append(row)
        return pd.DataFrame(rows, columns=columns + ["citers"])

    def save_to_csv(self, records: List[PaperRecord], filename: str):
        """Saves a list of records to a CSV file using a pandas DataFrame.

        Args:
            records (List[PaperRecord]): The records to save.
            filename (str): The name of the CSV file to save to.

        """
        if not records:
            self.logger.warning("No results to save to CSV.")
        self.to_dataframe(records).to_csv(filename, index=False, encoding="utf-8")
        self.logger.info(f"Successfully saved {len(records)} results to CSV file: {filename}")
