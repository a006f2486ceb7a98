import pandas as pd
from config import OUTPUT_SCHEMAS, DATA_DICTIONARY, save_table


def build_data_dictionary(schemas=OUTPUT_SCHEMAS):
    """
    One row per (table, column) of the output datasets:
      - `table`: output file name
      - `column`, `dtype`, `description` from the schema in config
    """
    rows = [
        {"table": table, "column": column, "dtype": dtype, "description": description}
        for table, schema in schemas.items()
        for column, (dtype, description) in schema.items()
    ]
    return pd.DataFrame(rows, columns=["table", "column", "dtype", "description"])


def main():
    print("Building data dictionary...")
    dictionary = build_data_dictionary()
    save_table(dictionary, DATA_DICTIONARY)

if __name__ == "__main__":
    main()
