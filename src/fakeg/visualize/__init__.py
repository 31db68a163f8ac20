from fakeg.visualize.opt import plot_ir_spectrum, plot_optimization_progress

__all__ = ["plot_ir_spectrum", "plot_optimization_progress"]
