import matplotlib
matplotlib.use("Agg")  # charts are written to disk only

import matplotlib.pyplot as plt
from mpl_toolkits.axes_grid1 import make_axes_locatable
import numpy as np
from pathlib import Path
from typing import Optional

from utils.logger_config import get_logger

logger = get_logger(__name__)


class ImageChartGenerator:
    """Renders disparity maps as annotated charts with a colour bar."""

    def __init__(self, img: np.ndarray, xlabel: str, ylabel: str,
                 save_path_result: str, range_max: Optional[float] = None,
                 range_min: Optional[float] = None, invalid_value: float = -1):
        # frame
        self.figsize = (12, 6)
        self.dpi = 100
        self.pad_inches = 0.3
        self.fontsize = 14
        self.fig = None
        self.ax = None

        # data, with rejected pixels masked so they render as "bad"
        self.img = np.ma.masked_equal(np.asarray(img, dtype=np.float32), invalid_value)
        self.xlabel = xlabel
        self.ylabel = ylabel

        # colour range, falls back to the valid data range
        valid = self.img.compressed()
        self.min = range_min if range_min is not None else (float(valid.min()) if valid.size else 0.0)
        self.max = range_max if range_max is not None else (float(valid.max()) if valid.size else 1.0)

        self.save_path_result = Path(save_path_result)
        self.photo_name = None

    def create_disparity(self, photo_name: Optional[str] = None,
                         target_disparity: Optional[float] = None) -> Path:
        """
        Save the disparity chart as ``<photo_name>.jpg``.

        Args:
            photo_name: File stem (default 'disparity')
            target_disparity: Optional extra colour bar tick

        Returns:
            Path: Path of the written chart
        """
        self.photo_name = "disparity" if photo_name is None else photo_name
        self._setup_figure()

        cmap_ = plt.get_cmap('jet_r').copy()
        cmap_.set_bad(color="black")
        im1 = self.ax.imshow(self.img, cmap=cmap_, vmin=self.min, vmax=self.max)

        # color bar
        divider = make_axes_locatable(self.ax)
        cax = divider.append_axes("right", size="5%", pad=self.pad_inches)
        ticks = [self.min, self.max] if target_disparity is None else [self.min, target_disparity, self.max]
        cbar = self.fig.colorbar(im1, cax=cax, ticks=ticks)
        cbar.ax.invert_yaxis()
        cbar.ax.tick_params(labelsize=self.fontsize)

        return self._save_and_close()

    def _setup_figure(self):
        self.fig, self.ax = plt.subplots(1, 1, figsize=self.figsize, dpi=self.dpi)
        self.ax.set_xlabel(self.xlabel, fontsize=self.fontsize)
        self.ax.set_ylabel(self.ylabel, fontsize=self.fontsize)
        self.ax.tick_params(axis='both', which='major', labelsize=self.fontsize)

    def _save_and_close(self) -> Path:
        self.save_path_result.mkdir(parents=True, exist_ok=True)
        output = self.save_path_result / f"{self.photo_name}.jpg"
        try:
            self.fig.savefig(output, bbox_inches='tight', pad_inches=self.pad_inches)
        finally:
            plt.close(self.fig)
        logger.debug(f"Saved chart: {output}")
        return output
