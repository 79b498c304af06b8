# visualization.py
import matplotlib

matplotlib.use('Agg')

import matplotlib.colors as mcolors
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt

import config


class StoreMapPlot:
    """Static drawing of a StoreMap with the shopper, target and path overlaid.

    Cells are drawn with x to the right and y downwards, matching the grid's
    ``[y, x]`` indexing.
    """

    def __init__(self, store_map, ax=None):
        self.store_map = store_map
        if ax is None:
            size = max(4.0, store_map.size * 0.6)
            self.fig, self.ax = plt.subplots(figsize=(size * 1.3, size))
        else:
            self.fig, self.ax = ax.figure, ax

        self.custom_cmap = mcolors.ListedColormap([config.COLOR_PATH_ON_MAP, config.COLOR_SHELF_ON_MAP])
        self.bounds = [-0.5, 0.5, 1.5]
        self.norm = mcolors.BoundaryNorm(self.bounds, self.custom_cmap.N)
        self.plot_base_map()

    def plot_base_map(self):
        n = self.store_map.size
        self.ax.clear()
        self.ax.imshow(self.store_map.grid, cmap=self.custom_cmap, norm=self.norm,
                       origin='upper', interpolation='nearest',
                       extent=[-0.5, n - 0.5, n - 0.5, -0.5])

        for i, fence in enumerate(self.store_map.geofences):
            color = config.GEOFENCE_COLORS[i % len(config.GEOFENCE_COLORS)]
            rect = mpatches.Rectangle(
                (fence.min_x - 0.5, fence.min_y - 0.5),
                fence.max_x - fence.min_x + 1, fence.max_y - fence.min_y + 1,
                fill=True, alpha=0.15, color=color, label=fence.label, zorder=2,
            )
            self.ax.add_patch(rect)

        if self.store_map.access_points:
            xs = [ap.cell[0] for ap in self.store_map.access_points]
            ys = [ap.cell[1] for ap in self.store_map.access_points]
            self.ax.scatter(xs, ys, marker='o', color=config.COLOR_AP_MARKER, s=100, label='AP', zorder=5)

        for product in self.store_map.products:
            x, y = product.cell
            self.ax.scatter(x, y, marker='D', color=config.COLOR_PRODUCT_MARKER, s=60, zorder=5)
            self.ax.annotate(product.name, (x, y), textcoords='offset points', xytext=(5, 5), fontsize=8)

        self.ax.set_xticks(range(n))
        self.ax.set_yticks(range(n))
        self.ax.set_xlim(-0.5, n - 0.5)
        self.ax.set_ylim(n - 0.5, -0.5)
        self.ax.set_xlabel("x (cell)")
        self.ax.set_ylabel("y (cell)")
        self.ax.grid(True, which='both', color='lightgray', linestyle=':', linewidth=0.5)

    def draw_state(self, position=None, zone=None, target=None, target_name=None, path=None):
        if path:
            xs = [c[0] for c in path]
            ys = [c[1] for c in path]
            self.ax.plot(xs, ys, color=config.COLOR_PATH_LINE, linewidth=3, label='Path', zorder=7)

        if target is not None:
            label = f'To: {target_name}' if target_name else 'Target'
            self.ax.scatter(target[0], target[1], marker='*', color=config.COLOR_TARGET_MARKER,
                            edgecolors='black', s=250, label=label, zorder=10)

        if position is not None:
            self.ax.scatter(position[0], position[1], marker='s', color=config.COLOR_POSITION_MARKER,
                            s=150, label='You', zorder=10)

        self.ax.set_title(f"Current zone: {zone}" if zone else "Not in any specific area")

        handles, labels = self.ax.get_legend_handles_labels()
        unique_labels = {}
        for handle, label in zip(handles, labels):
            if label not in unique_labels:
                unique_labels[label] = handle
        self.ax.legend(unique_labels.values(), unique_labels.keys(), loc='upper left', bbox_to_anchor=(1.02, 1))
        self.fig.tight_layout()

    def save(self, filename, dpi=100):
        self.fig.savefig(filename, dpi=dpi)

    def close(self):
        plt.close(self.fig)


def render_store_map(store_map, filename, position=None, zone=None, target=None, target_name=None, path=None):
    """Draw the store and the current navigation state into an image file."""
    plot = StoreMapPlot(store_map)
    try:
        plot.draw_state(position=position, zone=zone, target=target, target_name=target_name, path=path)
        plot.save(filename)
    finally:
        plot.close()
    return filename
