from .consts import MAXZ, PROFILE, TIME
from .containers import SampleDataset

# rank of a dimension in CF order: T, Z, Y/X or profile, others
DIMENSION_RANK = {
    TIME: 0,
    "DEPTH": 1,
    MAXZ: 1,
    "LATITUDE": 2,
    "LONGITUDE": 2,
    PROFILE: 2,
}
OTHER_RANK = 3


def check_dimension_order(ds: SampleDataset):
    """Check the dimensions are in CF order: time, vertical, horizontal, the rest"""
    ranks = [DIMENSION_RANK.get(name, OTHER_RANK) for name in ds.dimension_names]
    if ranks != sorted(ranks):
        raise ValueError(f"Dimensions are not in CF order: {ds.dimension_names}")


def check_shapes(ds: SampleDataset):
    """Check every variable has the shape implied by the dimensions it refers to"""
    for var in ds.variables:
        if any(idx >= len(ds.dimensions) for idx in var.dimensions):
            raise ValueError(f"{var.name} refers to a dimension that does not exist")
        if list(var.dimensions) != sorted(var.dimensions):
            raise ValueError(f"{var.name} dimensions are not in CF order")

        expected = tuple(len(ds.dimensions[idx]) for idx in var.dimensions)
        if var.data.shape != expected:
            raise ValueError(
                f"{var.name} has shape {var.data.shape}, "
                f"its dimensions {ds.dims_of(var)} imply {expected}"
            )


def check_dataset(ds: SampleDataset):
    check_dimension_order(ds)
    check_shapes(ds)
