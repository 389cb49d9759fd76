"""
Input/Output Manager (HDF5)
Handles saving and loading the ScanState to .h5 files.
"""
import logging
import os
import tempfile
from dataclasses import fields
from importlib.metadata import version, PackageNotFoundError

import h5py
import numpy as np

from dipolarrsa.model.state import ScanSettings, ScanState
from dipolarrsa.scan.statistics import ReplicaStatistics

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("dipolarrsa")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# HDF5 attributes cannot hold None
_NONE = "none"

_INT_COLUMNS = ("n_replicas", "min_count", "max_count")


class IOManager:

    @staticmethod
    def save_scan(state: ScanState, filepath: str) -> None:
        """
        Write the scan to an HDF5 file, replacing any previous snapshot.

        The data is written to a temporary file next to the target and moved
        into place, so an interrupted write leaves the last snapshot intact.
        """
        logger.debug(f"Saving scan to: {filepath}")
        directory = os.path.dirname(os.path.abspath(filepath))
        fd, temp_path = tempfile.mkstemp(suffix=".h5.tmp", dir=directory)
        os.close(fd)

        try:
            with h5py.File(temp_path, "w") as f:
                f.attrs["version"] = APP_VERSION

                # --- 1. SAVE SETTINGS ---
                settings = state.settings
                grp_set = f.create_group("settings")
                grp_set.attrs["p_plus_minus"] = settings.p_plus_minus
                grp_set.attrs["n_replicas"] = settings.n_replicas
                grp_set.attrs["max_rounds"] = settings.max_rounds
                grp_set.attrs["workers"] = settings.workers
                grp_set.attrs["seed"] = _NONE if settings.seed is None else str(settings.seed)
                grp_set.attrs["output_path"] = _NONE if settings.output_path is None else settings.output_path
                grp_set.create_dataset("lengths", data=np.asarray(settings.lengths, dtype=np.float64))

                # --- 2. SAVE RESULTS ---
                grp_res = f.create_group("results")
                for column in fields(ReplicaStatistics):
                    dtype = np.int64 if column.name in _INT_COLUMNS else np.float64
                    data = np.array([getattr(row, column.name) for row in state.results], dtype=dtype)
                    grp_res.create_dataset(column.name, data=data)
                grp_res.create_dataset("failed_lengths", data=np.asarray(state.failed_lengths, dtype=np.float64))

            os.replace(temp_path, filepath)
            logger.debug(f"Scan saved with {state.completed} rows.")

        except Exception as e:
            logger.exception(f"Failed to save scan: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise e

    @staticmethod
    def load_scan(filepath: str) -> ScanState:
        logger.info(f"Loading scan from: {filepath}")
        if not os.path.exists(filepath) or not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                state = ScanState()

                # --- 1. LOAD SETTINGS ---
                if "settings" in f:
                    grp_set = f["settings"]
                    seed = _as_str(grp_set.attrs.get("seed", _NONE))
                    output_path = _as_str(grp_set.attrs.get("output_path", _NONE))
                    state.settings = ScanSettings(
                        p_plus_minus=float(grp_set.attrs["p_plus_minus"]),
                        lengths=grp_set["lengths"][:].tolist(),
                        n_replicas=int(grp_set.attrs["n_replicas"]),
                        max_rounds=int(grp_set.attrs["max_rounds"]),
                        seed=None if seed == _NONE else int(seed),
                        workers=int(grp_set.attrs.get("workers", 1)),
                        output_path=None if output_path == _NONE else output_path,
                    )

                # --- 2. LOAD RESULTS ---
                if "results" in f:
                    grp_res = f["results"]
                    columns = {
                        column.name: grp_res[column.name][:].tolist()
                        for column in fields(ReplicaStatistics)
                    }
                    n_rows = len(columns["length"])
                    state.results = [
                        ReplicaStatistics(**{name: values[i] for name, values in columns.items()})
                        for i in range(n_rows)
                    ]
                    if "failed_lengths" in grp_res:
                        state.failed_lengths = grp_res["failed_lengths"][:].tolist()

            logger.info(f"Scan loaded with {state.completed} rows.")
            return state

        except Exception as e:
            logger.exception(f"Failed to load scan: {e}")
            raise e


def _as_str(value) -> str:
    """HDF5 may return attributes as bytes or numpy strings."""
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)
