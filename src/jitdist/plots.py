import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def plot_results(results, path=None):
    """
    Bar charts of mean run time (log scale) and speedup per implementation.

    Parameters:
    -----------
    results : pandas DataFrame
        Output of benchmark.run_benchmark
    path : str, optional
        Where to save the figure

    Returns:
    --------
    fig : matplotlib Figure
    """
    names = results['implementation'].tolist()
    n_samples = results['n_samples'].iloc[0]
    n_features = results['n_features'].iloc[0]

    fig, axs = plt.subplots(1, 2, figsize=(12, 5))
    fig.suptitle(f'Pairwise distance on a {n_samples} x {n_features} matrix')

    axs[0].bar(names, results['mean_time'], yerr=results['std_time'], capsize=4)
    axs[0].set_yscale('log')
    axs[0].set_ylabel('Mean time (s)')
    axs[0].set_title('Run time')

    axs[1].bar(names, results['speedup'], color='tab:orange')
    axs[1].set_ylabel('Speedup (x)')
    axs[1].set_title('Speedup')

    for ax in axs:
        ax.tick_params(axis='x', rotation=30)
    fig.tight_layout()

    if path is not None:
        fig.savefig(path, dpi=150)
    return fig
