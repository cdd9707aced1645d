"""
Core DegFlow analysis orchestrator
"""

import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from .config import RunConfig, load_config, validate_config
from .differential import (classify, rank_genes, significant_genes,
                           summarize_classification)
from .enrichment import plot_gsea_dotplot, prepare_ranking, run_prerank
from .exceptions import DegFlowError, MalformedInputError
from .genomics import (HighlightSet, compare_sets, compute_group_means,
                       heatmap_view, label_lookup, ma_view, volcano_view)
from .io import (expression_columns, load_de_table, load_expression_table,
                 read_gene_list)
from .utils import (get_logger, log_execution_time, setup_logging,
                    validate_directory_exists, validate_environment,
                    validate_output_permissions)
from .visualization import (create_clustered_heatmap, create_ma_plot,
                            create_venn_diagram, create_volcano_plot)

logger = get_logger(__name__)

DEFAULT_STEPS = ["load", "classify", "views", "enrichment", "overlap", "plots", "export"]

# A failure here aborts the run before anything is drawn
FATAL_STEPS = {"load", "classify"}


class DegFlowAnalysis:
    """
    Orchestrates one differential-expression plotting run

    Loads the configured tables, classifies genes, builds one view per plot
    type, optionally runs GSEA and a two-list overlap, renders the figures
    and exports the labeled tables.
    """

    def __init__(
        self,
        config: Union[str, Path, RunConfig, Dict[str, Any]],
        log_level: str = "INFO",
        log_file: Optional[Union[str, Path]] = None,
        configure_logging: bool = True,
    ):
        """
        Initialize DegFlow analysis

        Args:
            config: Configuration file path, RunConfig object, or config dict
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: Optional log file path
            configure_logging: Install DegFlow's console/file handlers
        """
        if configure_logging:
            setup_logging(level=log_level, log_file=log_file)

        if isinstance(config, (str, Path)):
            self.config = load_config(config)
        elif isinstance(config, dict):
            self.config = RunConfig(**config)
        elif isinstance(config, RunConfig):
            self.config = config
        else:
            raise ValueError(
                "Invalid config type. Expected str, Path, dict, or RunConfig object"
            )

        self.output_dir = self.config.output_path
        self._validate_environment()
        self.key = self.config.columns.get("id_column", "gene_id")
        self.on_mismatch = self.config.join.get("on_mismatch", "warn")

        # Tables
        self.de_table: Optional[pd.DataFrame] = None
        self.expression_table: Optional[pd.DataFrame] = None
        self.comparison_table: Optional[pd.DataFrame] = None
        self.classified: Optional[pd.DataFrame] = None
        self.comparison_classified: Optional[pd.DataFrame] = None

        # Derived
        self.views: Dict[str, Any] = {}
        self.summary = None
        self.ranking: Optional[pd.Series] = None
        self.enrichment = None
        self.overlap = None
        self.highlights = HighlightSet(
            "highlight_genes", tuple(self.config.visualization.get("highlight_genes", []))
        )

        self.results: Dict[str, Any] = {}
        self.execution_times: Dict[str, float] = {}

        logger.info(f"DegFlow analysis '{self.config.project_name}' initialized")

    def _validate_environment(self) -> None:
        """Log configuration and dependency issues, prepare the output directory"""
        issues = validate_config(self.config)
        if issues:
            logger.warning("Configuration issues found:")
            for issue in issues:
                logger.warning(f"  - {issue}")

        env_issues = validate_environment()
        if env_issues:
            logger.warning("Environment issues found:")
            for issue in env_issues:
                logger.warning(f"  - {issue}")

        if validate_directory_exists(self.output_dir, create_if_missing=True):
            validate_output_permissions(self.output_dir)

    @log_execution_time
    def load_inputs(self) -> Dict[str, Any]:
        """Load the DE table plus optional expression and comparison tables"""
        if not self.config.de_file:
            raise MalformedInputError("No differential expression file configured")

        self.de_table = load_de_table(
            self.config.resolve_path(self.config.de_file), self.config
        )
        loaded = {"de_rows": len(self.de_table)}

        if self.config.expression_file:
            self.expression_table = load_expression_table(
                self.config.resolve_path(self.config.expression_file), self.config
            )
            loaded["expression_rows"] = len(self.expression_table)

        if self.config.comparison_file:
            comparison_path = self.config.resolve_path(self.config.comparison_file)
            if comparison_path.suffix in (".txt", ".list"):
                genes = read_gene_list(
                    comparison_path, self.config.columns.get("id_delimiter", "|")
                )
                self.comparison_table = pd.DataFrame({self.key: genes})
            else:
                self.comparison_table = load_de_table(comparison_path, self.config)
            loaded["comparison_rows"] = len(self.comparison_table)

        return {"success": True, **loaded}

    @log_execution_time
    def classify(self) -> Dict[str, Any]:
        """Label the loaded DE table (and comparison table, when it has stats)"""
        if self.de_table is None:
            raise DegFlowError("Inputs must be loaded before classification")

        thresholds = self.config.thresholds
        self.classified = classify(
            self.de_table,
            fc_threshold=thresholds["fc_threshold"],
            p_threshold=thresholds["p_threshold"],
        )
        self.summary = summarize_classification(
            self.classified,
            fc_threshold=thresholds["fc_threshold"],
            p_threshold=thresholds["p_threshold"],
        )
        logger.info(
            f"Classified {self.summary.n_tested} genes: {self.summary.n_up} up, "
            f"{self.summary.n_down} down, {self.summary.n_not_significant} not significant"
        )

        if self.comparison_table is not None and "adjusted_p_value" in self.comparison_table:
            self.comparison_classified = classify(
                self.comparison_table,
                fc_threshold=thresholds["fc_threshold"],
                p_threshold=thresholds["p_threshold"],
            )

        return {"success": True, "summary": self.summary.to_dict()}

    @log_execution_time
    def build_views(self) -> Dict[str, Any]:
        """One independent joined view per plot type"""
        if self.classified is None:
            raise DegFlowError("Classification must run before building views")

        pseudocount = self.config.expression.get("pseudocount", 1.0)
        self.views = {"volcano": volcano_view(self.classified)}

        if self.expression_table is not None:
            groups = self.config.expression.get("groups", {})
            means = compute_group_means(self.expression_table, groups, id_col=self.key)
            self.views["ma"] = ma_view(
                self.classified,
                means,
                key=self.key,
                pseudocount=pseudocount,
                on_mismatch=self.on_mismatch,
            )
            self.views["heatmap"] = heatmap_view(
                self.classified,
                self.expression_table,
                expression_columns(groups),
                max_genes=self.config.visualization.get("heatmap_max_genes"),
                key=self.key,
                pseudocount=pseudocount,
                scale_rows=self.config.visualization.get("heatmap_zscore", True),
            )
        else:
            logger.info("No expression table configured, skipping MA and heatmap views")

        return {
            "success": True,
            "views": {name: len(view) for name, view in self.views.items()},
        }

    @log_execution_time
    def run_enrichment(self, gene_sets: Optional[Any] = None) -> Dict[str, Any]:
        """Preranked GSEA against the configured or given gene sets"""
        if self.classified is None:
            raise DegFlowError("Classification must run before enrichment")

        gene_sets = gene_sets if gene_sets is not None else self.config.gene_sets
        if not gene_sets:
            logger.info("No gene sets configured, skipping enrichment")
            return {"success": True, "skipped": True}

        if isinstance(gene_sets, str) and not gene_sets.endswith(".gmt"):
            # Enrichr library name, used as is
            resolved = gene_sets
        elif isinstance(gene_sets, str):
            resolved = str(self.config.resolve_path(gene_sets))
        else:
            resolved = gene_sets

        self.ranking = prepare_ranking(self.classified, id_col=self.key)
        self.enrichment = run_prerank(self.ranking, resolved, self.config)
        self.views["enrichment"] = self.enrichment.results_df

        return {
            "success": True,
            "n_gene_sets": len(self.enrichment.results_df),
            "n_significant": self.enrichment.significant_sets,
        }

    @log_execution_time
    def compare_gene_lists(
        self,
        genes_a: Optional[Iterable[str]] = None,
        genes_b: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Overlap of two gene lists

        Defaults to the DEGs of the primary table against the DEGs of the
        comparison table (or all its genes when it is a plain list).
        """
        if genes_a is None:
            if self.classified is None:
                raise DegFlowError("Classification must run before overlap")
            genes_a = significant_genes(self.classified, id_col=self.key)

        if genes_b is None:
            if self.comparison_classified is not None:
                genes_b = significant_genes(self.comparison_classified, id_col=self.key)
            elif self.comparison_table is not None:
                genes_b = set(self.comparison_table[self.key].astype(str))
            else:
                logger.info("No comparison list configured, skipping overlap")
                return {"success": True, "skipped": True}

        self.overlap = compare_sets(genes_a, genes_b)
        logger.info(
            f"Overlap: {self.overlap.count_a} vs {self.overlap.count_b} genes, "
            f"{self.overlap.count_intersection} shared"
        )
        return {
            "success": True,
            "count_a": self.overlap.count_a,
            "count_b": self.overlap.count_b,
            "count_intersection": self.overlap.count_intersection,
        }

    @log_execution_time
    def render_plots(self) -> Dict[str, Any]:
        """Render every figure whose view exists"""
        plots_dir = self.output_dir / "plots"
        name = self.config.project_name
        label_column = self.config.columns.get("label_column")
        plots: Dict[str, List[Path]] = {}

        if "volcano" in self.views:
            highlights = self.highlights.select(self.views["volcano"], key=self.key)
            plots["volcano"] = create_volcano_plot(
                self.views["volcano"],
                plots_dir / f"{name}_volcano",
                self.config,
                highlights=highlights,
                label_column=label_column,
            )

        if "ma" in self.views:
            highlights = self.highlights.select(self.views["ma"], key=self.key)
            plots["ma"] = create_ma_plot(
                self.views["ma"],
                plots_dir / f"{name}_ma",
                self.config,
                highlights=highlights,
                label_column=label_column,
            )

        if "heatmap" in self.views:
            row_labels = None
            if len(self.highlights):
                row_labels = label_lookup(
                    self.classified,
                    self.highlights.gene_ids,
                    key=self.key,
                    label_column=label_column,
                )
            plots["heatmap"] = create_clustered_heatmap(
                self.views["heatmap"],
                plots_dir / f"{name}_heatmap",
                self.config,
                row_labels=row_labels,
            )

        if self.enrichment is not None:
            plots["gsea_dotplot"] = plot_gsea_dotplot(
                self.enrichment.results_df,
                plots_dir / f"{name}_gsea_dotplot",
                self.config,
            )

        if self.overlap is not None:
            plots["venn"] = create_venn_diagram(
                self.overlap, plots_dir / f"{name}_venn", self.config
            )

        return {"success": True, "plots": plots}

    @log_execution_time
    def export_tables(self) -> Dict[str, Any]:
        """Write labeled, ranked and overlap tables as TSV"""
        tables_dir = self.output_dir / "tables"
        tables_dir.mkdir(parents=True, exist_ok=True)
        name = self.config.project_name
        files: Dict[str, Path] = {}

        if self.classified is not None:
            files["classified"] = tables_dir / f"{name}_classified.tsv"
            self.classified.to_csv(files["classified"], sep="\t", index=False)

            ranking = self.ranking
            if ranking is None:
                ranking = rank_genes(self.classified, id_col=self.key)
            files["ranking"] = tables_dir / f"{name}_ranking.tsv"
            ranking.to_frame().to_csv(files["ranking"], sep="\t")

        if self.enrichment is not None:
            files["enrichment"] = tables_dir / f"{name}_gsea.tsv"
            self.enrichment.results_df.to_csv(files["enrichment"], sep="\t", index=False)

        if self.overlap is not None:
            files["overlap"] = tables_dir / f"{name}_overlap.tsv"
            self.overlap.to_frame(tuple(self.config.visualization["venn_labels"])).to_csv(
                files["overlap"], sep="\t", index=False
            )

        for path in files.values():
            logger.info(f"Table written: {path}")

        return {"success": True, "files": files}

    def run_full_pipeline(self, steps: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Run pipeline steps in order

        Load and classification failures propagate; a failure in a later step
        is recorded in the results and the remaining steps still run.
        """
        logger.info("=" * 60)
        logger.info("Starting DegFlow pipeline")
        logger.info("=" * 60)

        steps = steps or DEFAULT_STEPS
        runners = {
            "load": self.load_inputs,
            "classify": self.classify,
            "views": self.build_views,
            "enrichment": self.run_enrichment,
            "overlap": self.compare_gene_lists,
            "plots": self.render_plots,
            "export": self.export_tables,
        }

        start_time = time.time()

        for step in steps:
            if step not in runners:
                logger.warning(f"Unknown pipeline step: {step}")
                continue

            step_start = time.time()
            logger.info(f"{'=' * 20} STEP: {step.upper()} {'=' * 20}")

            try:
                self.results[step] = runners[step]()
            except Exception as e:
                if step in FATAL_STEPS:
                    logger.error(f"Step {step} failed, aborting run: {e}")
                    raise
                logger.error(f"Step {step} failed: {e}", exc_info=True)
                self.results[step] = {"success": False, "error": str(e)}
            finally:
                self.execution_times[step] = time.time() - step_start

        self.execution_times["total"] = time.time() - start_time
        self._log_pipeline_summary()

        return self.results

    def _log_pipeline_summary(self) -> None:
        logger.info("DEGFLOW PIPELINE SUMMARY")
        for step, result in self.results.items():
            status = "SUCCESS" if result.get("success") else "FAILED"
            logger.info(f"  {step}: {status} ({self.execution_times.get(step, 0):.2f}s)")
            if not result.get("success") and "error" in result:
                logger.info(f"    Error: {result['error']}")
        logger.info(f"  TOTAL: {self.execution_times.get('total', 0):.2f} seconds")

    def get_results(self) -> Dict[str, Any]:
        return self.results

    def get_execution_times(self) -> Dict[str, float]:
        return self.execution_times
