from collections import OrderedDict


class RowCounts:
    """
    Row counts recorded at each stage boundary of the pipeline.

    Downstream checks compare against these, so every stage that can
    change the number of rows records its output size here:

        counts = RowCounts()
        counts.record("loaded", df)
        counts["loaded"]   # -> 58
    """

    def __init__(self):
        self._counts = OrderedDict()

    def record(self, stage, df):
        n = len(df)
        self._counts[stage] = n
        return n

    def count(self, stage):
        return self._counts[stage]

    def __getitem__(self, stage):
        return self._counts[stage]

    def __contains__(self, stage):
        return stage in self._counts

    def as_dict(self):
        return dict(self._counts)

    def report(self):
        print("Row counts by stage:")
        for stage, n in self._counts.items():
            print(f"  {stage:<20} {n:>10,}")
