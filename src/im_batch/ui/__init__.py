# Streamlit front-end for im_batch
