import functools
from pathlib import Path

import gradio as gr

from core.config import OutputConfig, RenderingConfig

from . import callbacks, utils

PLACEHOLDER_TEXT = (
    "複数行のテキストを入力してください。空行で区切ることで別々の吹き出しになります。"
)


def create_layout(fonts_base_dir: Path) -> gr.Blocks:
    """Creates the Gradio UI layout and connects callbacks."""

    rendering_defaults = RenderingConfig()
    output_defaults = OutputConfig()

    # Gradio's copies of served archives are purged hourly after an hour
    with gr.Blocks(title="Manga Bubble Generator", delete_cache=(3600, 3600)) as app:
        session_output_dir = gr.State(
            None, delete_callback=utils.remove_session_output_dir
        )

        gr.Markdown("# 漫画の吹き出し生成ツール")

        font_choices, default_font = utils.get_available_font_packs(fonts_base_dir)

        with gr.Row():
            with gr.Column(scale=1):
                input_text = gr.Textbox(
                    label="Text",
                    placeholder=PLACEHOLDER_TEXT,
                    lines=10,
                    max_lines=40,
                )
                with gr.Accordion("Rendering Settings", open=False):
                    font_dropdown = gr.Dropdown(
                        choices=font_choices,
                        label="Font Pack",
                        value=default_font,
                        filterable=False,
                    )
                    refresh_fonts_button = gr.Button("Refresh Fonts", size="sm")
                    font_size = gr.Slider(
                        minimum=12,
                        maximum=28,
                        step=1,
                        value=rendering_defaults.font_size,
                        label="Font Size",
                    )
                    scale_factor = gr.Slider(
                        minimum=1,
                        maximum=8,
                        step=1,
                        value=rendering_defaults.scale_factor,
                        label="Supersampling Factor",
                    )
                    png_compression = gr.Slider(
                        minimum=0,
                        maximum=9,
                        step=1,
                        value=output_defaults.png_compression,
                        label="PNG Compression",
                    )
                    apply_mask = gr.Checkbox(
                        value=output_defaults.apply_mask,
                        label="Transparent corners",
                        info="Clip the image to the bubble ellipse",
                    )
                    verbose = gr.Checkbox(value=False, label="Verbose logging")
                with gr.Row():
                    generate_button = gr.Button("Generate", variant="primary")
                    clear_button = gr.Button("Clear")
            with gr.Column(scale=1):
                output_gallery = gr.Gallery(
                    label="Bubbles",
                    show_label=True,
                    columns=3,
                    height="auto",
                    object_fit="contain",
                )
                archive_file = gr.File(
                    label="すべての吹き出しをダウンロード",
                    interactive=False,
                )
                with gr.Row():
                    bubble_number = gr.Slider(
                        minimum=1,
                        maximum=1,
                        step=1,
                        value=1,
                        label="Bubble #",
                    )
                    copy_button = gr.Button("クリップボードにコピー")
                status_message = gr.Textbox(label="Status", interactive=False)

        settings_inputs = [
            font_dropdown,
            font_size,
            scale_factor,
            png_compression,
            apply_mask,
            verbose,
        ]
        generate_fn = functools.partial(
            callbacks.handle_generate_click, fonts_base_dir=fonts_base_dir
        )
        generate_inputs = [input_text] + settings_inputs + [session_output_dir]
        generate_outputs = [
            output_gallery,
            archive_file,
            status_message,
            bubble_number,
            session_output_dir,
        ]

        generate_button.click(
            fn=generate_fn,
            inputs=generate_inputs,
            outputs=generate_outputs,
        )
        # Re-render on every edit; only the latest edit's result is kept
        input_text.change(
            fn=generate_fn,
            inputs=generate_inputs,
            outputs=generate_outputs,
            trigger_mode="always_last",
            show_progress="minimal",
        )
        copy_button.click(
            fn=functools.partial(
                callbacks.handle_copy_click, fonts_base_dir=fonts_base_dir
            ),
            inputs=[input_text, bubble_number] + settings_inputs,
            outputs=[status_message],
        )
        refresh_fonts_button.click(
            fn=functools.partial(utils.update_font_dropdown, fonts_base_dir),
            outputs=[font_dropdown],
            queue=False,
        )
        clear_button.click(
            fn=callbacks.handle_clear_click,
            outputs=[input_text, output_gallery, archive_file, status_message],
            queue=False,
        )

    return app
